"""Core types, retry policies, circuit breakers and an environment doctor for AI agent workflows."""

__version__ = "0.1.0"