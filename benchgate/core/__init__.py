"""Core utilities: logging setup and value coercion."""
