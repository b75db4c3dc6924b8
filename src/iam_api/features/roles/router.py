"""Routes for role management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Header, Path, Response, status

from iam_api.api.deps import LifecycleManagerDep
from iam_api.common.etag import apply_etag, parse_if_match
from iam_api.common.listing import ListQueryParams, list_query_params
from iam_api.features.management.kinds import ROLE
from iam_api.features.management.schemas import EntityOut, EntityPage

from .schemas import RoleIn, RoleOut, RolePage

router = APIRouter(tags=["roles"])

ROLE_BODY = Body(..., description="Role fields. On create the name becomes the role id.")
ROLE_ID_PARAM = Annotated[
    str,
    Path(description="Role identifier (its name at creation).", alias="roleId"),
]
IF_MATCH_HEADER = Annotated[str | None, Header(alias="If-Match")]


@router.get(
    "/roles",
    response_model=RolePage,
    status_code=status.HTTP_200_OK,
    summary="List roles",
)
def list_roles(
    manager: LifecycleManagerDep,
    list_query: Annotated[ListQueryParams, Depends(list_query_params)],
) -> EntityPage:
    return manager.find_all(ROLE, page_size=list_query.rows_per_page, param=list_query.param)


@router.post(
    "/roles",
    response_model=RoleOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
    responses={status.HTTP_409_CONFLICT: {"description": "Role already exists."}},
)
def create_role(
    response: Response,
    manager: LifecycleManagerDep,
    payload: RoleIn = ROLE_BODY,
) -> EntityOut:
    role = manager.save(ROLE, payload.name, payload)
    apply_etag(response, role.rev)
    return role


@router.get(
    "/roles/{roleId}",
    response_model=RoleOut,
    status_code=status.HTTP_200_OK,
    summary="Retrieve a role",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Role not found."}},
)
def read_role(
    role_id: ROLE_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
) -> EntityOut:
    role = manager.find_one(ROLE, role_id)
    apply_etag(response, role.rev)
    return role


@router.put(
    "/roles/{roleId}",
    response_model=RoleOut,
    status_code=status.HTTP_200_OK,
    summary="Replace a role",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Role not found."}},
)
def update_role(
    role_id: ROLE_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
    payload: RoleIn = ROLE_BODY,
) -> EntityOut:
    role = manager.update(
        ROLE,
        role_id,
        payload,
        expected_revision=parse_if_match(if_match),
    )
    apply_etag(response, role.rev)
    return role


@router.delete(
    "/roles/{roleId}",
    status_code=status.HTTP_200_OK,
    summary="Delete a role",
    response_class=Response,
    responses={status.HTTP_404_NOT_FOUND: {"description": "Role not found."}},
)
def delete_role(
    role_id: ROLE_ID_PARAM,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
) -> Response:
    manager.remove(ROLE, role_id, expected_revision=parse_if_match(if_match))
    return Response(status_code=status.HTTP_200_OK)


__all__ = ["router"]
