"""Record types exchanged with the users backend."""

from user_admin.models.user import DRAFT_FIELDS, REQUIRED_FIELDS, User, UserDraft, parse_users

__all__ = ["DRAFT_FIELDS", "REQUIRED_FIELDS", "User", "UserDraft", "parse_users"]
