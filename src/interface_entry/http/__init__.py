"""HTTP surface of the scene panel service."""
