"""Admin application service."""
