"""Entry points: HTTP application, bootstrap and transport runtime."""
