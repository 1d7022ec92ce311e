"""
Add/edit form bound to a UserDraft.
"""

from typing import Awaitable, Callable, Optional

from user_admin.core.logging import get_logger
from user_admin.models.user import DRAFT_FIELDS, REQUIRED_FIELDS, User, UserDraft

logger = get_logger(__name__)

SaveHandler = Callable[[UserDraft], Awaitable[object]]


class FormValidationError(ValueError):
    """Raised when a required form field is blank."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Required fields missing: {', '.join(missing)}")
        self.missing = missing


class UserForm:
    """
    Modal form state for adding or editing one user.

    The edited user's id is kept apart from the draft so it is never sent
    in a request body.
    """

    def __init__(self, title: str, draft: UserDraft, user_id: Optional[int] = None):
        self.title = title
        self.draft = draft
        self.user_id = user_id
        self.is_open = True
        self.is_submitting = False

    @classmethod
    def for_add(cls) -> "UserForm":
        return cls("Add New User", UserDraft())

    @classmethod
    def for_edit(cls, user: User) -> "UserForm":
        return cls("Edit User", UserDraft.from_user(user), user_id=user.id)

    @property
    def is_add_mode(self) -> bool:
        return self.user_id is None

    def set_field(self, name: str, value: str) -> None:
        if name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        self.draft = self.draft.model_copy(update={name: value})

    def missing_required(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self.draft, name).strip()]

    def validate(self) -> None:
        missing = self.missing_required()
        if missing:
            raise FormValidationError(missing)

    def close(self) -> None:
        self.is_open = False

    async def submit(self, on_save: SaveHandler) -> None:
        """
        Validate and hand the draft to the save handler.

        The form closes only when the handler succeeds; handler errors
        propagate after being logged.
        """
        self.validate()
        self.is_submitting = True
        try:
            await on_save(self.draft)
            self.close()
        except Exception:
            logger.error("Error saving user", exc_info=True)
            raise
        finally:
            self.is_submitting = False
