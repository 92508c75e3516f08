import logging
from typing import Tuple

from console_errors import BackendError, ConsoleError, GateClosedError, ValidationError

logger = logging.getLogger(__name__)

NOT_MOUNTED = "No partition is mounted. Mount a partition before logging in."
NOT_LOGGED = "You must log in to access this section."


class SessionGate:
    """Mount and login flags guarding the session-protected areas."""

    def __init__(self, client):
        self.client = client
        self.is_mounted = False
        self.is_logged = False
        self.loading = False

    # ---------- MOUNT ----------
    async def check_mount(self) -> Tuple[bool, str]:
        self.loading = True
        try:
            reply = await self.client.check_partition()
        except ConsoleError as exc:
            self._set_mounted(False)
            return False, str(exc)
        finally:
            self.loading = False

        mounted = reply.status == "success"
        self._set_mounted(mounted)
        return mounted, reply.message or (NOT_MOUNTED if not mounted else "")

    def _set_mounted(self, mounted: bool):
        if mounted != self.is_mounted:
            logger.info("mount state: %s", "mounted" if mounted else "unmounted")
        self.is_mounted = mounted

    # ---------- LOGIN ----------
    async def login(self, username: str, password: str, user_id: str) -> Tuple[bool, str]:
        if not self.is_mounted:
            return False, NOT_MOUNTED
        if not (username and password and user_id):
            raise ValidationError("All fields are required: user ID, username and password.")

        self.loading = True
        try:
            reply = await self.client.login(username, password, user_id)
        except BackendError as exc:
            return False, str(exc)
        finally:
            self.loading = False

        if reply.status != "success":
            return False, reply.message or "Login failed"
        self.is_logged = True
        logger.info("user %s logged in", username)
        return True, reply.message

    def end_session(self):
        if self.is_logged:
            logger.info("session ended")
        self.is_logged = False

    # ---------- GUARD ----------
    def guard(self):
        """Raise GateClosedError unless a partition is mounted and a user is logged in."""
        if not self.is_mounted:
            raise GateClosedError(NOT_MOUNTED)
        if not self.is_logged:
            raise GateClosedError(NOT_LOGGED)

    def can_enter(self) -> Tuple[bool, str]:
        try:
            self.guard()
        except GateClosedError as exc:
            return False, str(exc)
        return True, ""
