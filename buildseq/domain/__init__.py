"""Domain layer for build sequence scheduling."""
