"""Core configuration, security and shared primitives."""
