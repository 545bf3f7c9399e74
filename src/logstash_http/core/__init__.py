"""Batching, serialization and delivery engine."""
