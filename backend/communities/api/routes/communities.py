"""Community Routes: CRUD plus join/leave over CommunityService.

Invariants:
    - create, join, leave and /my depend on current_user_id (401/404 before the store)
    - list-all and get-by-id are public
    - A missing community becomes ResourceNotFoundError (404) here, never deeper
    - /my is declared before /{community_id} so it is not captured as an id

Design Decisions:
    - update/delete are public: the write surface is kept as observed upstream,
      pending an ownership policy decision
    - join/leave answer 200 with an empty body whether or not membership changed
"""

from fastapi import APIRouter, Depends, Response, status

from communities.api.dependencies import current_user_id, get_community_service
from communities.core.community import Community
from communities.core.domain_types import CommunityId, UserId
from communities.core.errors import ErrorContext, ResourceNotFoundError
from communities.schemas.community import CommunityResponse, CommunityWrite
from communities.services.community_service import CommunityService

router = APIRouter(prefix="/api/v1/communities", tags=["communities"])


def _not_found(community_id: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        "Community", community_id, ErrorContext(community_id=community_id),
    )


def _found_or_404(community: Community | None, community_id: str) -> CommunityResponse:
    if community is None:
        raise _not_found(community_id)
    return CommunityResponse.from_domain(community)


@router.post(
    "", response_model=CommunityResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_community(
    body: CommunityWrite,
    actor: UserId = Depends(current_user_id),
    service: CommunityService = Depends(get_community_service),
):
    """Create a community; the caller becomes creator and first member."""
    community = await service.create_community(body.name, body.description, actor)
    return CommunityResponse.from_domain(community)


@router.get("", response_model=list[CommunityResponse])
async def list_communities(
    service: CommunityService = Depends(get_community_service),
):
    communities = await service.get_all_communities()
    return [CommunityResponse.from_domain(c) for c in communities]


@router.get("/my", response_model=list[CommunityResponse])
async def list_my_communities(
    actor: UserId = Depends(current_user_id),
    service: CommunityService = Depends(get_community_service),
):
    """Communities whose roster currently contains the caller."""
    communities = await service.get_communities_by_user(actor)
    return [CommunityResponse.from_domain(c) for c in communities]


@router.get("/{community_id}", response_model=CommunityResponse)
async def get_community(
    community_id: str,
    service: CommunityService = Depends(get_community_service),
):
    community = await service.get_community_by_id(CommunityId(community_id))
    return _found_or_404(community, community_id)


@router.post("/{community_id}/join")
async def join_community(
    community_id: str,
    actor: UserId = Depends(current_user_id),
    service: CommunityService = Depends(get_community_service),
):
    """Join a community. Joining twice is success with no further effect."""
    if not await service.join_community(CommunityId(community_id), actor):
        raise _not_found(community_id)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/{community_id}/leave")
async def leave_community(
    community_id: str,
    actor: UserId = Depends(current_user_id),
    service: CommunityService = Depends(get_community_service),
):
    """Leave a community. Leaving as a non-member is success with no effect."""
    if not await service.leave_community(CommunityId(community_id), actor):
        raise _not_found(community_id)
    return Response(status_code=status.HTTP_200_OK)


@router.put("/{community_id}", response_model=CommunityResponse)
async def update_community(
    community_id: str,
    body: CommunityWrite,
    service: CommunityService = Depends(get_community_service),
):
    """Overwrite name and description. Members and creator are untouched."""
    community = await service.update_community(
        CommunityId(community_id), body.name, body.description,
    )
    return _found_or_404(community, community_id)


@router.delete(
    "/{community_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_community(
    community_id: str,
    service: CommunityService = Depends(get_community_service),
):
    if not await service.delete_community(CommunityId(community_id)):
        raise _not_found(community_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
