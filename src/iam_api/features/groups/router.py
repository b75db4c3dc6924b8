"""Routes for group management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Header, Path, Response, status

from iam_api.api.deps import LifecycleManagerDep
from iam_api.common.etag import apply_etag, parse_if_match
from iam_api.common.listing import ListQueryParams, list_query_params
from iam_api.features.management.kinds import GROUP
from iam_api.features.management.schemas import EntityOut, EntityPage

from .schemas import GroupIn, GroupOut, GroupPage

router = APIRouter(tags=["groups"])

GROUP_BODY = Body(..., description="Group fields. On create the name becomes the group id.")
GROUP_ID_PARAM = Annotated[
    str,
    Path(description="Group identifier (its name at creation).", alias="groupId"),
]
IF_MATCH_HEADER = Annotated[str | None, Header(alias="If-Match")]


@router.get(
    "/groups",
    response_model=GroupPage,
    status_code=status.HTTP_200_OK,
    summary="List groups",
)
def list_groups(
    manager: LifecycleManagerDep,
    list_query: Annotated[ListQueryParams, Depends(list_query_params)],
) -> EntityPage:
    return manager.find_all(GROUP, page_size=list_query.rows_per_page, param=list_query.param)


# Group creation lives on the singular path.
@router.post(
    "/group",
    response_model=GroupOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses={status.HTTP_409_CONFLICT: {"description": "Group already exists."}},
)
def create_group(
    response: Response,
    manager: LifecycleManagerDep,
    payload: GroupIn = GROUP_BODY,
) -> EntityOut:
    group = manager.save(GROUP, payload.name, payload)
    apply_etag(response, group.rev)
    return group


@router.get(
    "/groups/{groupId}",
    response_model=GroupOut,
    status_code=status.HTTP_200_OK,
    summary="Retrieve a group",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Group not found."}},
)
def read_group(
    group_id: GROUP_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
) -> EntityOut:
    group = manager.find_one(GROUP, group_id)
    apply_etag(response, group.rev)
    return group


@router.put(
    "/groups/{groupId}",
    response_model=GroupOut,
    status_code=status.HTTP_200_OK,
    summary="Replace a group",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Group not found."}},
)
def update_group(
    group_id: GROUP_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
    payload: GroupIn = GROUP_BODY,
) -> EntityOut:
    group = manager.update(
        GROUP,
        group_id,
        payload,
        expected_revision=parse_if_match(if_match),
    )
    apply_etag(response, group.rev)
    return group


@router.delete(
    "/groups/{groupId}",
    status_code=status.HTTP_200_OK,
    summary="Delete a group",
    response_class=Response,
    responses={status.HTTP_404_NOT_FOUND: {"description": "Group not found."}},
)
def delete_group(
    group_id: GROUP_ID_PARAM,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
) -> Response:
    manager.remove(GROUP, group_id, expected_revision=parse_if_match(if_match))
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router"]
