"""Role resolution: explicit user roles merged with roles inherited from groups."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from iam_api.common.logging import log_context

from .documents import GroupDocument, UserDocument
from .errors import DetailLocation, ResourceNotFoundError

logger = logging.getLogger(__name__)

GroupLookup = Callable[[str], GroupDocument | None]


class RoleResolver:
    """Compute the full role set a user must be stored with.

    Expansion is single-level: only a group's own ``assigned_roles`` count.
    Resolution is additive, so an update can add roles but never drop one
    the stored user already holds.
    """

    def __init__(self, *, lookup_group: GroupLookup) -> None:
        self._lookup_group = lookup_group

    def resolve_for_create(self, user: UserDocument) -> set[str]:
        inherited = self._inherited_roles(user.assigned_groups)
        merged = set(user.assigned_roles) | inherited
        logger.debug(
            "roles.resolve.create",
            extra=log_context(
                entity_type="user",
                entity_id=user.id,
                explicit=len(user.assigned_roles),
                inherited=len(inherited),
                merged=len(merged),
            ),
        )
        return merged

    def resolve_for_update(self, incoming: UserDocument, existing: UserDocument) -> set[str]:
        """Merge roles for an update.

        Every group in the payload must exist. Groups only the stored user
        references may have been deleted since; those are skipped, since the
        roles they granted are already in the stored ``assigned_roles``.
        """

        inherited = self._inherited_roles(incoming.assigned_groups)
        stale_groups = set(existing.assigned_groups) - set(incoming.assigned_groups)
        inherited |= self._inherited_roles(stale_groups, user_id=existing.id, strict=False)
        merged = set(incoming.assigned_roles) | set(existing.assigned_roles) | inherited
        logger.debug(
            "roles.resolve.update",
            extra=log_context(
                entity_type="user",
                entity_id=existing.id,
                inherited=len(inherited),
                merged=len(merged),
            ),
        )
        return merged

    def _inherited_roles(
        self,
        group_ids: Iterable[str],
        *,
        user_id: str | None = None,
        strict: bool = True,
    ) -> set[str]:
        roles: set[str] = set()
        for group_id in sorted(set(group_ids)):
            group = self._lookup_group(group_id)
            if group is None and not strict:
                logger.warning(
                    "roles.resolve.stale_group_skipped",
                    extra=log_context(entity_type="user", entity_id=user_id, group_id=group_id),
                )
                continue
            if group is None:
                raise ResourceNotFoundError("Group not found.").add_detail(
                    f"Assigned group {group_id!r} does not exist.",
                    group_id,
                    code="group.not_found",
                    field="assigned_groups",
                    location=DetailLocation.BODY,
                )
            roles |= group.assigned_roles
        return roles


__all__ = ["GroupLookup", "RoleResolver"]
