"""
Module: utils
Description: Package initialization for utility functions.

Current utilities:
- logger: Structured logging configuration and helpers
- headers: Webhook header normalization
- metrics: CloudWatch metrics publishing
"""

__all__ = []
