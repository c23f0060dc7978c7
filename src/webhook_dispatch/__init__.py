"""
Package: webhook_dispatch
Description: Fan-out webhook delivery with narrowed, queued retries.

Delivers one rendered payload to many HTTP endpoints, reports successes
immediately and re-queues only the endpoints that failed, with backoff,
until they succeed or the attempt budget runs out.
"""

__version__ = "0.3.0"
