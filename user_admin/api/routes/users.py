"""
User routes: CRUD proxy to the users backend and the CSV download.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from pydantic import field_validator

from user_admin.clients.users import UserClient
from user_admin.core.logging import audit_logger, get_logger
from user_admin.export.csv_exporter import UsersCSVExporter
from user_admin.models.user import REQUIRED_FIELDS, User, UserDraft

logger = get_logger(__name__)

router = APIRouter()


class UserDraftIn(UserDraft):
    """Request body: the form's required fields must not be blank."""

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


def get_user_client(request: Request) -> UserClient:
    """Record client shared for the app lifespan."""
    return request.app.state.user_client


def get_exporter() -> UsersCSVExporter:
    return UsersCSVExporter()


@router.get("", response_model=list[User])
async def list_users(
    search: Optional[str] = Query(default=None),
    client: UserClient = Depends(get_user_client),
) -> list[User]:
    return await client.list_users(search)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    draft: UserDraftIn,
    client: UserClient = Depends(get_user_client),
) -> User:
    user = await client.create_user(draft)
    audit_logger.log_user_created(user.id)
    return user


# Declared before /{user_id} so "export" is not parsed as an id
@router.get("/export")
async def export_users(
    client: UserClient = Depends(get_user_client),
    exporter: UsersCSVExporter = Depends(get_exporter),
) -> Response:
    """
    Download every user as CSV.

    Returns:
        users.csv as an attachment
    """
    export = await exporter.export(client)
    return Response(
        content=export.as_bytes(),
        media_type=export.media_type,
        headers={"Content-Disposition": export.content_disposition},
    )


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    draft: UserDraftIn,
    client: UserClient = Depends(get_user_client),
) -> User:
    user = await client.update_user(user_id, draft)
    audit_logger.log_user_updated(user_id)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    client: UserClient = Depends(get_user_client),
) -> Response:
    await client.delete_user(user_id)
    audit_logger.log_user_deleted(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
