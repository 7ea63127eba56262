"""Auth application service."""
