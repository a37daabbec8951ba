from __future__ import annotations

from typing import Optional

import structlog

from salespro import validators
from salespro.constants import ERROR_PROFILE_INCOMPLETE, THEME_DARK, THEME_LIGHT
from salespro.models.settings import Settings
from salespro.state import AppState

logger = structlog.get_logger(__name__)


class AuthService:
    """
    Local profile gate. There are no credentials: logging in means the
    profile (name, employee id, store location) is filled in.
    """

    def __init__(self, state: AppState):
        self.state = state
        self._last_error: str = ""

    def get_last_error(self) -> str:
        return self._last_error

    async def current_settings(self) -> Settings:
        return self.state.settings or await self.state.load_settings()

    async def is_logged_in(self) -> bool:
        return (await self.current_settings()).is_logged_in

    async def login(
        self,
        user_name: str,
        emp_id: str,
        store_location: str,
        store_name: Optional[str] = None,
    ) -> bool:
        self._last_error = ""
        if not all(validators.nonempty(v) for v in (user_name, emp_id, store_location)):
            self._last_error = ERROR_PROFILE_INCOMPLETE
            return False

        changes = {
            "user_name": user_name.strip(),
            "emp_id": emp_id.strip(),
            "store_location": store_location.strip(),
            "is_logged_in": True,
        }
        if store_name is not None:
            changes["store_name"] = store_name.strip()
        await self.state.update_settings(**changes)
        logger.info("profile_login", emp_id=changes["emp_id"])
        return True

    async def logout(self) -> None:
        """Clears the flag only; profile fields stay for the next login."""
        self._last_error = ""
        await self.state.update_settings(is_logged_in=False)
        logger.info("profile_logout")

    async def toggle_theme(self) -> str:
        current = (await self.current_settings()).theme
        theme = THEME_LIGHT if current == THEME_DARK else THEME_DARK
        await self.state.update_settings(theme=theme)
        return theme
