"""Built-in transport routes."""
