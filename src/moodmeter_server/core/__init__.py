"""Core configuration, persistence and security primitives."""
