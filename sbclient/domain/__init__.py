"""Domain Layer: value objects, content-tree variants, errors, events and ports.

Has no dependencies on the infrastructure layer.
"""
