"""Posts application service."""
