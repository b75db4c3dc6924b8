from __future__ import annotations

import pytest

from iam_api.features.management.documents import GroupDocument, UserDocument
from iam_api.features.management.errors import DetailLocation, ResourceNotFoundError
from iam_api.features.management.resolver import RoleResolver


class _Groups:
    def __init__(self, **groups: set[str]) -> None:
        self._groups = {
            name: GroupDocument(id=name, name=name, assigned_roles=roles)
            for name, roles in groups.items()
        }
        self.lookups: list[str] = []

    def __call__(self, group_id: str) -> GroupDocument | None:
        self.lookups.append(group_id)
        return self._groups.get(group_id)


def test_create_merges_explicit_and_inherited_roles() -> None:
    resolver = RoleResolver(lookup_group=_Groups(g1={"r2"}, g2={"r2", "r3"}))
    user = UserDocument(assigned_roles={"r1"}, assigned_groups={"g1", "g2"})

    assert resolver.resolve_for_create(user) == {"r1", "r2", "r3"}


def test_create_without_groups_keeps_explicit_roles() -> None:
    groups = _Groups()
    resolver = RoleResolver(lookup_group=groups)

    assert resolver.resolve_for_create(UserDocument(assigned_roles={"r1"})) == {"r1"}
    assert groups.lookups == []


def test_create_with_unknown_group_fails() -> None:
    resolver = RoleResolver(lookup_group=_Groups(g1={"r1"}))
    user = UserDocument(assigned_groups={"g1", "ghost"})

    with pytest.raises(ResourceNotFoundError) as excinfo:
        resolver.resolve_for_create(user)

    (detail,) = excinfo.value.details
    assert detail.code == "group.not_found"
    assert detail.value == "ghost"
    assert detail.field == "assigned_groups"
    assert detail.location is DetailLocation.BODY


def test_update_is_union_of_both_users_and_both_group_sets() -> None:
    resolver = RoleResolver(lookup_group=_Groups(g1={"r2"}, g2={"r4"}))
    existing = UserDocument(assigned_roles={"r1"}, assigned_groups={"g1"})
    incoming = UserDocument(assigned_roles={"r3"}, assigned_groups={"g2"})

    assert resolver.resolve_for_update(incoming, existing) == {"r1", "r2", "r3", "r4"}


def test_update_never_drops_roles() -> None:
    resolver = RoleResolver(lookup_group=_Groups(g1={"r2"}))
    existing = UserDocument(assigned_roles={"r1", "r2"}, assigned_groups={"g1"})
    incoming = UserDocument()

    assert resolver.resolve_for_update(incoming, existing) == {"r1", "r2"}


def test_each_group_is_looked_up_once() -> None:
    groups = _Groups(g1={"r1"}, g2={"r2"})
    resolver = RoleResolver(lookup_group=groups)
    existing = UserDocument(assigned_groups={"g1", "g2"})
    incoming = UserDocument(assigned_groups={"g2", "g1"})

    resolver.resolve_for_update(incoming, existing)

    assert sorted(groups.lookups) == ["g1", "g2"]


def test_update_skips_group_deleted_since_last_write() -> None:
    groups = _Groups(g1={"r1"})
    resolver = RoleResolver(lookup_group=groups)
    existing = UserDocument(
        id="jane@example.com", assigned_roles={"r9"}, assigned_groups={"deleted"}
    )

    merged = resolver.resolve_for_update(UserDocument(assigned_groups={"g1"}), existing)

    assert merged == {"r1", "r9"}
    assert sorted(groups.lookups) == ["deleted", "g1"]


def test_update_with_unknown_group_in_payload_fails() -> None:
    resolver = RoleResolver(lookup_group=_Groups(g1={"r1"}))
    existing = UserDocument(assigned_groups={"g1"})

    with pytest.raises(ResourceNotFoundError) as excinfo:
        resolver.resolve_for_update(UserDocument(assigned_groups={"ghost"}), existing)

    assert excinfo.value.details[0].value == "ghost"
