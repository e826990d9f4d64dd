"""Core scheduling, metadata and orchestration logic."""
