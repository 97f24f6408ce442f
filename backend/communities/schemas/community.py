"""Community Schemas: Pydantic models with field-level validation for API boundaries.

Invariants:
    - CommunityWrite.name: 1-200 chars after stripping, never whitespace-only
    - CommunityWrite.description: optional, defaults to empty string
    - CommunityResponse.members is sorted, so identical rosters serialize identically

Design Decisions:
    - One write schema for create and update: both carry exactly {name, description}
    - field_validator for side-effect-free transforms (strip): keeps models pure
"""

from pydantic import BaseModel, Field, field_validator

from communities.core.community import Community


class CommunityWrite(BaseModel):
    """Create/update body: validates name length and whitespace."""
    name: str = Field(min_length=1, max_length=200)
    description: str = Field("", max_length=5000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: str | None) -> str:
        return "" if v is None else v


class CommunityResponse(BaseModel):
    """Community response: public-facing community data."""
    id: str
    name: str
    description: str
    created_by: str
    members: list[str]

    @classmethod
    def from_domain(cls, community: Community) -> "CommunityResponse":
        return cls(
            id=community.id,
            name=community.name,
            description=community.description,
            created_by=community.created_by,
            members=sorted(community.members),
        )
