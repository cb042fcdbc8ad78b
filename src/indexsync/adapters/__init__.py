"""Infrastructure adapters for indexsync."""
