"""
Module: config
Description: Package initialization for configuration.

- settings: Environment-backed application settings
- delivery: Immutable per-webhook delivery configuration
"""

__all__ = []
