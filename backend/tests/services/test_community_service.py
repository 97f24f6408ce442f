"""Community Service: verifies membership semantics over the in-memory store.

Invariants:
    - create seeds members with exactly the actor
    - join/leave are idempotent and report only community existence
    - update never touches members or created_by
    - Concurrent joins/leaves on one community are all reflected
"""

import asyncio

import pytest

from communities.core.domain_types import CommunityId, UserId
from communities.core.errors import CommunityValidationError
from communities.services.community_service import CommunityService

U1 = UserId("user-1")
U2 = UserId("user-2")
U3 = UserId("user-3")
MISSING = CommunityId("nonexistent-id")


async def test_create_seeds_creator_as_only_member(service):
    community = await service.create_community("Photographers", "x", U1)
    assert community.members == frozenset({U1})
    assert community.created_by == U1
    assert community.id


async def test_create_allocates_distinct_ids(service):
    a = await service.create_community("A", "", U1)
    b = await service.create_community("B", "", U1)
    assert a.id != b.id


async def test_create_uses_injected_id_factory(memory_store):
    service = CommunityService(memory_store, id_factory=lambda: CommunityId("fixed"))
    community = await service.create_community("A", "", U1)
    assert community.id == "fixed"


async def test_create_rejects_blank_name_without_storing(service, memory_store):
    with pytest.raises(CommunityValidationError):
        await service.create_community("   ", "desc", U1)
    assert await memory_store.get_all() == []


async def test_create_allows_empty_description(service):
    community = await service.create_community("Readers", "", U1)
    assert community.description == ""


async def test_get_by_id_round_trips_created_record(service):
    created = await service.create_community("Photographers", "x", U1)
    assert await service.get_community_by_id(created.id) == created


async def test_get_by_id_missing_is_none(service):
    assert await service.get_community_by_id(MISSING) is None


async def test_get_all_returns_every_community(service):
    a = await service.create_community("A", "", U1)
    b = await service.create_community("B", "", U2)
    assert {c.id for c in await service.get_all_communities()} == {a.id, b.id}


async def test_get_all_is_a_snapshot(service):
    created = await service.create_community("A", "", U1)
    snapshot = await service.get_all_communities()
    await service.join_community(created.id, U2)
    assert snapshot[0].members == frozenset({U1})


async def test_join_twice_equals_join_once(service):
    created = await service.create_community("A", "", U1)
    assert await service.join_community(created.id, U2) is True
    after_once = await service.get_community_by_id(created.id)
    assert await service.join_community(created.id, U2) is True
    after_twice = await service.get_community_by_id(created.id)
    assert after_once == after_twice
    assert after_twice.members == frozenset({U1, U2})


async def test_creator_joining_again_reports_success(service):
    created = await service.create_community("A", "", U1)
    assert await service.join_community(created.id, U1) is True
    assert (await service.get_community_by_id(created.id)).members == frozenset({U1})


async def test_join_missing_community_returns_false(service):
    assert await service.join_community(MISSING, U1) is False


async def test_leave_as_non_member_is_noop_success(service):
    created = await service.create_community("A", "", U1)
    assert await service.leave_community(created.id, U2) is True
    assert (await service.get_community_by_id(created.id)).members == frozenset({U1})


async def test_leave_missing_community_returns_false(service):
    assert await service.leave_community(MISSING, U1) is False


async def test_get_communities_by_user_follows_membership(service):
    a = await service.create_community("A", "", U1)
    b = await service.create_community("B", "", U2)
    await service.join_community(b.id, U1)
    assert {c.id for c in await service.get_communities_by_user(U1)} == {a.id, b.id}
    assert {c.id for c in await service.get_communities_by_user(U2)} == {b.id}
    assert await service.get_communities_by_user(U3) == []


async def test_update_overwrites_details_only(service):
    created = await service.create_community("A", "old", U1)
    await service.join_community(created.id, U2)
    updated = await service.update_community(created.id, "B", "new")
    assert updated.name == "B"
    assert updated.description == "new"
    assert updated.members == frozenset({U1, U2})
    assert updated.created_by == U1
    assert await service.get_community_by_id(created.id) == updated


async def test_update_missing_community_returns_none(service):
    assert await service.update_community(MISSING, "B", "new") is None


async def test_update_rejects_blank_name(service):
    created = await service.create_community("A", "old", U1)
    with pytest.raises(CommunityValidationError):
        await service.update_community(created.id, "", "new")
    assert (await service.get_community_by_id(created.id)).name == "A"


async def test_delete_removes_community(service):
    created = await service.create_community("A", "", U1)
    assert await service.delete_community(created.id) is True
    assert await service.get_community_by_id(created.id) is None
    assert await service.get_communities_by_user(U1) == []


async def test_delete_missing_returns_false(service):
    assert await service.delete_community(MISSING) is False


async def test_join_after_delete_returns_false(service):
    created = await service.create_community("A", "", U1)
    await service.delete_community(created.id)
    assert await service.join_community(created.id, U2) is False


async def test_concurrent_joins_are_not_lost(service):
    created = await service.create_community("A", "", U1)
    results = await asyncio.gather(
        service.join_community(created.id, U2),
        service.join_community(created.id, U3),
    )
    assert results == [True, True]
    members = (await service.get_community_by_id(created.id)).members
    assert members >= {U2, U3}


async def test_concurrent_join_and_leave_by_different_users(service):
    created = await service.create_community("A", "", U1)
    await service.join_community(created.id, U2)
    await asyncio.gather(
        service.leave_community(created.id, U2),
        service.join_community(created.id, U3),
    )
    members = (await service.get_community_by_id(created.id)).members
    assert members == frozenset({U1, U3})


async def test_many_concurrent_joins_all_land(service):
    created = await service.create_community("A", "", U1)
    users = [UserId(f"user-{i}") for i in range(50)]
    await asyncio.gather(*(service.join_community(created.id, u) for u in users))
    members = (await service.get_community_by_id(created.id)).members
    assert members == frozenset(users) | {U1}


async def test_photographers_scenario(service):
    created = await service.create_community("Photographers", "x", U1)
    assert created.members == frozenset({U1})

    assert await service.join_community(created.id, U2) is True
    assert (await service.get_community_by_id(created.id)).members == frozenset({U1, U2})

    assert await service.leave_community(created.id, U1) is True
    after_leave = await service.get_community_by_id(created.id)
    assert after_leave.members == frozenset({U2})
    assert after_leave.created_by == U1

    assert created.id not in {c.id for c in await service.get_communities_by_user(U1)}
    assert created.id in {c.id for c in await service.get_communities_by_user(U2)}
