"""Users application service."""
