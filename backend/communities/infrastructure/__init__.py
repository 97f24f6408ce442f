"""Infrastructure Layer: IO implementations of the core boundary protocols.

Invariants:
    - Every class here satisfies a Protocol from core/repository_protocols.py
    - SQLAlchemy exceptions never escape as-is (database.py maps them)
"""
