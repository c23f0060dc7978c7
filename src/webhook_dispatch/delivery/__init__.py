"""
Package: delivery
Description: Webhook delivery for webhook dispatch.

Provides the HTTP push client, result classification, backoff, retry
continuations, callbacks, the delivery orchestrator and the SQS worker
that resumes queued retries.
"""
