"""Routes for user management."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Header, Path, Response, status

from iam_api.api.deps import LifecycleManagerDep
from iam_api.common.etag import apply_etag, parse_if_match
from iam_api.common.listing import ListQueryParams, list_query_params
from iam_api.features.management.kinds import USER
from iam_api.features.management.schemas import EntityOut, EntityPage

from .schemas import UserIn, UserOut, UserPage

router = APIRouter(tags=["users"])

USER_BODY = Body(
    ...,
    description="User fields. On create the email becomes the user id.",
)
USER_ID_PARAM = Annotated[
    str,
    Path(
        description="User identifier (the email the user was created with).",
        alias="userId",
    ),
]
IF_MATCH_HEADER = Annotated[
    str | None,
    Header(
        alias="If-Match",
        description="Revision the change is based on; stale revisions are rejected.",
    ),
]


@router.get(
    "/users",
    response_model=UserPage,
    status_code=status.HTTP_200_OK,
    summary="List users",
)
def list_users(
    manager: LifecycleManagerDep,
    list_query: Annotated[ListQueryParams, Depends(list_query_params)],
) -> EntityPage:
    return manager.find_all(
        USER,
        page_size=list_query.rows_per_page,
        param=list_query.param,
    )


@router.post(
    "/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "An assigned group does not exist."},
        status.HTTP_409_CONFLICT: {"description": "A user with this email already exists."},
    },
)
def create_user(
    response: Response,
    manager: LifecycleManagerDep,
    payload: UserIn = USER_BODY,
) -> EntityOut:
    user = manager.save(USER, str(payload.email), payload)
    apply_etag(response, user.rev)
    return user


@router.get(
    "/users/{userId}",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    summary="Retrieve a user",
    responses={status.HTTP_404_NOT_FOUND: {"description": "User not found."}},
)
def read_user(
    user_id: USER_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
) -> EntityOut:
    user = manager.find_one(USER, user_id)
    apply_etag(response, user.rev)
    return user


@router.put(
    "/users/{userId}",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    summary="Replace a user",
    description=(
        "Replaces every user field. Assigned roles are merged with the stored "
        "roles and the roles inherited from all assigned groups; roles are never removed."
    ),
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "User or assigned group not found."},
    },
)
def update_user(
    user_id: USER_ID_PARAM,
    response: Response,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
    payload: UserIn = USER_BODY,
) -> EntityOut:
    user = manager.update(
        USER,
        user_id,
        payload,
        expected_revision=parse_if_match(if_match),
    )
    apply_etag(response, user.rev)
    return user


@router.delete(
    "/users/{userId}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    response_class=Response,
    responses={status.HTTP_404_NOT_FOUND: {"description": "User not found."}},
)
def delete_user(
    user_id: USER_ID_PARAM,
    manager: LifecycleManagerDep,
    if_match: IF_MATCH_HEADER = None,
) -> Response:
    manager.remove(USER, user_id, expected_revision=parse_if_match(if_match))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
