"""Admin page state: list, search debouncing, add/edit form and actions."""

from user_admin.ui.controller import AdminController
from user_admin.ui.debounce import Debouncer
from user_admin.ui.form import FormValidationError, UserForm

__all__ = ["AdminController", "Debouncer", "FormValidationError", "UserForm"]
