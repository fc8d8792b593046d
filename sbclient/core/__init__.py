"""Core Application Layer: the request orchestrator and relation resolution.

Connects the domain layer with the infrastructure layer through interfaces.
"""
