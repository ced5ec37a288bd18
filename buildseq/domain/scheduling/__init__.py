"""Build sequence scheduling domain."""
