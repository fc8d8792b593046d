"""Response Cache Implementations.

Provides the in-memory and no-op strategies for the CacheProvider interface
and the process-wide cache-version tracker.
Bounded Context: Cache Management
"""
