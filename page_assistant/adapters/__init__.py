"""External content sources."""
