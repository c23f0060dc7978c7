"""
Package: sqs_queue
Description: Job queues for webhook retry continuations.

Provides the SQS job queue used in deployment and an in-memory queue
for local runs and tests.
"""
