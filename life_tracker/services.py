"""Authentication and notification collaborators injected into each tracker."""

from __future__ import annotations

import logging
from typing import Protocol

from flask import flash, session

logger = logging.getLogger(__name__)

SUCCESS = "default"
DESTRUCTIVE = "destructive"


class Auth(Protocol):
    def current_user_id(self) -> str | None: ...

    def sign_in(self, user_id: str) -> None: ...

    def sign_out(self) -> None: ...


class Notifier(Protocol):
    def notify(self, title: str, description: str, variant: str = SUCCESS) -> None: ...


# ---- Authentication ----

class SessionAuth:
    """Current user kept in the signed Flask session cookie."""

    key = "user_id"

    def current_user_id(self):
        return session.get(self.key)

    def sign_in(self, user_id):
        session[self.key] = user_id
        logger.info("Signed in %s", user_id)

    def sign_out(self):
        user_id = session.pop(self.key, None)
        logger.info("Signed out %s", user_id)


class StaticAuth:
    """Fixed user for the console and for tests."""

    def __init__(self, user_id: str | None = None):
        self.user_id = user_id

    def current_user_id(self):
        return self.user_id

    def sign_in(self, user_id):
        self.user_id = user_id

    def sign_out(self):
        self.user_id = None


# ---- Notifications ----

class FlashNotifier:
    """Toasts become flashed messages; the variant is the flash category."""

    def notify(self, title, description, variant=SUCCESS):
        flash(f"{title}: {description}", DESTRUCTIVE if variant == DESTRUCTIVE else "message")


class ConsoleNotifier:
    def notify(self, title, description, variant=SUCCESS):
        marker = "!" if variant == DESTRUCTIVE else "*"
        print(f"[{marker}] {title}: {description}")
