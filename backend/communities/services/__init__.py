"""Service Layer: async orchestration around the pure core.

Invariants:
    - Services receive their stores and identity capabilities by injection
    - No service imports FastAPI
"""
