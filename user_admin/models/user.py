"""
User record and draft models.

The backend owns ``id``; drafts are the create/update payload and never
carry one.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

DRAFT_FIELDS: tuple[str, ...] = ("first", "last", "email", "phone", "location", "hobby")
REQUIRED_FIELDS: tuple[str, ...] = ("first", "last", "email")


class UserDraft(BaseModel):
    """Create/update payload: a user without its server-assigned id."""

    model_config = ConfigDict(extra="ignore")

    first: str = ""
    last: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    hobby: str = ""

    @field_validator(*DRAFT_FIELDS, mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Backends may send null for optional columns."""
        return "" if v is None else v

    @classmethod
    def from_user(cls, user: "User") -> "UserDraft":
        """Hydrate a draft from an existing record for editing."""
        return cls(**user.model_dump(exclude={"id"}))

    def to_payload(self) -> dict[str, str]:
        """JSON body sent to the backend."""
        return self.model_dump()


class User(UserDraft):
    """A user record as returned by the backend."""

    id: int

    def display_name(self) -> str:
        return f"{self.first} {self.last}".strip()


def parse_users(data: Optional[Any]) -> list[User]:
    """Parse a JSON array of users, keeping server order."""
    if not data:
        return []
    return [User.model_validate(item) for item in data]
