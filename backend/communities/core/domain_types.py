"""Domain Types: identity wrappers that replace bare strings in domain logic.

Invariants:
    - CommunityId and UserId are opaque strings (uuid4 text by default)
    - Never compare a CommunityId with a UserId

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str ids over UUID: path parameters like "nonexistent-id" must reach the
      store and come back absent rather than fail request parsing
"""

from typing import NewType

CommunityId = NewType("CommunityId", str)
UserId = NewType("UserId", str)

BEARER_PREFIX = "Bearer "
