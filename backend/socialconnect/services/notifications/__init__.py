"""Notifications application service."""
