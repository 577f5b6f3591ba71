"""Request-level middleware and dependencies."""
