"""
Admin page controller.

Holds what the admin page shows (user list, loading flag, search term, open
form) and runs each user action as one backend round trip. Failures are
logged and reported through the notifier; none are retried.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

from user_admin.clients.users import UserClient
from user_admin.core.config import settings
from user_admin.core.logging import audit_logger, get_logger
from user_admin.export.csv_exporter import CSVExport, UsersCSVExporter
from user_admin.models.user import User, UserDraft
from user_admin.ui.debounce import Debouncer
from user_admin.ui.form import UserForm

logger = get_logger(__name__)

Notifier = Callable[[str], None]
Confirm = Callable[[str], bool]

LOAD_ERROR_MESSAGE = "Error loading users. Please check if the backend is running."
SAVE_ERROR_MESSAGE = "Error saving user. Please try again."
DELETE_ERROR_MESSAGE = "Error deleting user. Please try again."
EXPORT_ERROR_MESSAGE = "Error exporting CSV. Please try again."
DELETE_CONFIRM_MESSAGE = "Are you sure you want to delete this user?"


def _log_alert(message: str) -> None:
    logger.warning(message)


class AdminController:
    """
    State and actions of the users admin page.

    Only one mutating operation (save, delete, export) runs at a time; while
    one is outstanding the others are no-ops. List reads are not blocked.
    """

    def __init__(
        self,
        client: UserClient,
        exporter: Optional[UsersCSVExporter] = None,
        notifier: Optional[Notifier] = None,
        confirm: Optional[Confirm] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.client = client
        self.exporter = exporter if exporter is not None else UsersCSVExporter()
        self.notifier = notifier if notifier is not None else _log_alert
        self.confirm = confirm if confirm is not None else (lambda message: True)
        if debounce_seconds is None:
            debounce_seconds = settings.search_debounce_seconds
        self.search_debouncer = Debouncer(debounce_seconds)

        self.users: List[User] = []
        self.loading = False
        self.search_term = ""
        self.operation: Optional[str] = None
        self.form: Optional[UserForm] = None

    @property
    def can_operate(self) -> bool:
        return self.operation is None

    @contextmanager
    def _operation(self, key: str) -> Iterator[None]:
        self.operation = key
        try:
            yield
        finally:
            self.operation = None

    def _report(self, event: str, message: str, error: Exception, **context: Any) -> None:
        audit_logger.log_error(event, error, alert=message, **context)
        self.notifier(message)

    async def load_users(self, search: Optional[str] = None) -> List[User]:
        """Reload the list; on failure the previous list stays."""
        self.loading = True
        try:
            self.users = await self.client.list_users(search)
        except Exception as e:
            self._report("load_users", LOAD_ERROR_MESSAGE, e)
        finally:
            self.loading = False
        return self.users

    def set_search_term(self, term: str) -> None:
        """Record a keystroke; the fetch waits for the quiet period."""
        self.search_term = term
        self.search_debouncer.call(self.load_users, term)

    def open_add(self) -> UserForm:
        self.form = UserForm.for_add()
        return self.form

    def open_edit(self, user: User) -> Optional[UserForm]:
        if not self.can_operate:
            logger.debug(f"Edit of user {user.id} ignored, {self.operation} in progress")
            return None
        self.form = UserForm.for_edit(user)
        return self.form

    def close_form(self) -> None:
        if self.form is not None:
            self.form.close()
        self.form = None

    async def save(self, draft: UserDraft) -> Optional[User]:
        """
        Create or update depending on the open form, then reload.

        Raises:
            FetchError: Re-raised after the alert so the form stays open
        """
        if not self.can_operate:
            return None

        user_id = self.form.user_id if self.form is not None else None
        with self._operation("save"):
            try:
                if user_id is None:
                    user = await self.client.create_user(draft)
                    audit_logger.log_user_created(user.id)
                else:
                    user = await self.client.update_user(user_id, draft)
                    audit_logger.log_user_updated(user_id)
            except Exception as e:
                self._report("save_user", SAVE_ERROR_MESSAGE, e)
                raise

            await self.load_users(self.search_term)
        return user

    async def submit_form(self) -> Optional[User]:
        """Validate and save the open form, closing it on success."""
        if self.form is None or not self.can_operate:
            return None
        form = self.form
        saved: List[User] = []

        async def on_save(draft: UserDraft) -> None:
            user = await self.save(draft)
            if user is not None:
                saved.append(user)

        await form.submit(on_save)
        if self.form is form:
            self.form = None
        return saved[0] if saved else None

    async def delete(self, user_id: int) -> bool:
        """
        Delete after confirmation, then reload.

        Returns:
            True when the user was deleted
        """
        if not self.can_operate:
            logger.debug(f"Delete of user {user_id} ignored, {self.operation} in progress")
            return False
        if not self.confirm(DELETE_CONFIRM_MESSAGE):
            return False

        with self._operation(f"delete:{user_id}"):
            try:
                await self.client.delete_user(user_id)
            except Exception as e:
                self._report("delete_user", DELETE_ERROR_MESSAGE, e, user_id=user_id)
                return False
            audit_logger.log_user_deleted(user_id)
            await self.load_users(self.search_term)
        return True

    async def export_csv(self) -> Optional[CSVExport]:
        """Export every user, ignoring the search filter."""
        if not self.can_operate:
            return None

        with self._operation("export"):
            try:
                return await self.exporter.export(self.client)
            except Exception as e:
                self._report("export_csv", EXPORT_ERROR_MESSAGE, e)
                return None
