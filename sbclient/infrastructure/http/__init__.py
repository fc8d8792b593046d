"""HTTP Transport Implementations.

Adapts httpx to the HttpTransport interface.
Bounded Context: API Transport
"""
