"""API Resilience Implementations.

Contains the sliding window rate limiter, the throttled request queue and
the linear-backoff retry service for rate-limited responses.
Bounded Context: API Resilience
"""
