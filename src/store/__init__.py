"""Elasticsearch index access.

This module owns index lifecycle calls, document serialization, and
batched bulk submission.
"""
