"""Runtime helpers for the HTTP service."""
