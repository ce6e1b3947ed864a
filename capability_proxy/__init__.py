"""Capability-key scoped reverse proxy for the orchestration backend."""
