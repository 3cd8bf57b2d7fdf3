"""Persistence: engine/session wiring, ORM models and repository adapters."""
