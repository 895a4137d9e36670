# src/workdesk/core/session.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..remote.errors import ValidationError
from ..remote.models import User
from .ports import WorkdeskApi

logger = logging.getLogger(__name__)


class SessionGate:
    """
    Holds the signed-in user.

    Every store operation is gated on `current_user`; without one they are no-ops.
    `generation` increases on every identity change so async work started under
    one session can tell that it finished under another and drop its result.
    """

    def __init__(self, api: WorkdeskApi) -> None:
        self._api = api
        self._user: User | None = None
        self._generation = 0
        self._logout_callbacks: list[Callable[[], None]] = []

    @property
    def current_user(self) -> User | None:
        return self._user

    @property
    def is_signed_in(self) -> bool:
        return self._user is not None

    @property
    def generation(self) -> int:
        return self._generation

    def on_logout(self, callback: Callable[[], None]) -> None:
        """Register a hook run on logout (stores clear, confirmations cancel)."""
        self._logout_callbacks.append(callback)

    async def login(self, username: str, password: str) -> User:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = await self._api.login(username, password)
        self._switch_to(user)
        logger.info("Signed in user_id=%s username=%s", user.id, user.username)
        return user

    async def register(
        self,
        username: str,
        password: str,
        name: str,
        email: str | None = None,
    ) -> User:
        username = (username or "").strip()
        name = (name or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")
        if not name:
            raise ValidationError("Name is required for registration")

        user = await self._api.register(username, password, name, (email or "").strip() or None)
        self._switch_to(user)
        logger.info("Registered user_id=%s username=%s", user.id, user.username)
        return user

    def logout(self) -> None:
        if self._user is None:
            return
        logger.info("Signing out user_id=%s", self._user.id)
        self._user = None
        self._generation += 1
        self._run_logout_callbacks()

    def _switch_to(self, user: User) -> None:
        if self._user is not None and self._user.id == user.id:
            # Same identity: in-flight work stays valid.
            self._user = user
            return
        # A new login without logout still must not show the previous user's data.
        if self._user is not None:
            self._user = None
            self._run_logout_callbacks()
        self._user = user
        self._generation += 1

    def _run_logout_callbacks(self) -> None:
        for cb in self._logout_callbacks:
            try:
                cb()
            except Exception:
                logger.exception("Logout callback failed: %r", cb)
