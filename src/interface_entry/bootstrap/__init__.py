"""Application bootstrap helpers."""
