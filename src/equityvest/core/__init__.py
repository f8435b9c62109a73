"""
equityvest Core Module

Shared building blocks for the vesting and lottery subsystems:
- Typed exception hierarchy
- Configuration loading (YAML + environment overrides)
- Structured JSON logging
- Clock, admin authority and token custody collaborators
"""

__all__ = []
