"""Launch-at-login toggle backed by the OS login item registry."""

import logging

from backends import LoginItemRegistry
from errors import LoginItemError

logger = logging.getLogger(__name__)


class LoginItemManager:
    """
    Mirrors whether the app is registered to start at login.

    Assigning starts_at_login registers or unregisters the app. A failed
    call is logged and the assigned value is kept; refresh() re-reads the
    registry.
    """

    def __init__(self, registry: LoginItemRegistry) -> None:
        self.registry = registry
        self._starts_at_login: bool = bool(registry.is_enabled())

    @property
    def starts_at_login(self) -> bool:
        return self._starts_at_login

    @starts_at_login.setter
    def starts_at_login(self, value: bool) -> None:
        self._starts_at_login = bool(value)
        if self._starts_at_login:
            self._add_login_item()
        else:
            self._remove_login_item()

    def refresh(self) -> bool:
        self._starts_at_login = bool(self.registry.is_enabled())
        return self._starts_at_login

    def _add_login_item(self) -> None:
        try:
            self.registry.register()
        except LoginItemError as exc:
            logger.error("Failed to add login item: %s", exc)

    def _remove_login_item(self) -> None:
        try:
            self.registry.unregister()
        except LoginItemError as exc:
            logger.error("Failed to remove login item: %s", exc)
