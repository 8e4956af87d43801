"""Use-case services behind the HTTP routes."""
