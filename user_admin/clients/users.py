"""
Client for the users REST backend.

GET/POST /users, PUT/DELETE /users/{id}. The backend decides what a search
term matches; this client only forwards it.
"""

from typing import Optional

import httpx
from pydantic import ValidationError

from user_admin.clients.base import BaseAPIClient, FetchError
from user_admin.core.config import settings
from user_admin.core.logging import get_logger
from user_admin.models.user import User, UserDraft, parse_users

logger = get_logger(__name__)


def _parse_user(data: object, error_message: str) -> User:
    try:
        return User.model_validate(data)
    except ValidationError as e:
        logger.error(f"{error_message}: unexpected response body")
        raise FetchError(f"{error_message}: unexpected response body") from e


class UserClient(BaseAPIClient):
    """
    Users backend client.

    No caching: every list call goes to the backend. Callers sequence
    mutations themselves.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            base_url=base_url or settings.api_base_url,
            timeout=timeout or settings.api_timeout,
            transport=transport,
        )

    async def list_users(self, search: Optional[str] = None) -> list[User]:
        """
        Fetch users, optionally filtered by the backend.

        Args:
            search: Search term; sent as ``search`` only when non-empty

        Returns:
            Users in server order
        """
        params = {"search": search} if search else None
        data = await self.get("/users", params=params, error_message="Failed to fetch users")
        try:
            return parse_users(data)
        except ValidationError as e:
            logger.error("Failed to fetch users: unexpected response body")
            raise FetchError("Failed to fetch users: unexpected response body") from e

    async def create_user(self, draft: UserDraft) -> User:
        """Create a user; the returned record carries the new id."""
        data = await self.post(
            "/users", json=draft.to_payload(), error_message="Failed to create user"
        )
        user = _parse_user(data, "Failed to create user")
        logger.info(f"Created user {user.id}")
        return user

    async def update_user(self, user_id: int, draft: UserDraft) -> User:
        """Replace the fields of an existing user."""
        data = await self.put(
            f"/users/{user_id}", json=draft.to_payload(), error_message="Failed to update user"
        )
        return _parse_user(data, "Failed to update user")

    async def delete_user(self, user_id: int) -> None:
        """Delete a user. The response body is ignored."""
        await self.delete(
            f"/users/{user_id}", error_message="Failed to delete user", parse_body=False
        )
