import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

import directives
from command_interpreter import CommandInterpreter, SessionEnded
from console_config import ConsoleSettings
from console_errors import ConsoleError
from disk_registry import DiskRegistry
from engine_client import EngineClient
from partition_fetcher import PartitionFetcher
from registry_store import open_store
from session_gate import SessionGate
from tree_navigator import TreeNavigator

logger = logging.getLogger(__name__)


@dataclass
class Notice:
    text: str
    kind: str  # "success", "error" or "info"
    expires_at: float


class ConsoleShell:
    """Owns the console state objects and the effects that cross between them."""

    def __init__(self, client: EngineClient, store, notice_seconds: float = 5.0):
        self.client = client
        self.registry = DiskRegistry(store)
        self.fetcher = PartitionFetcher(client)
        self.navigator = TreeNavigator(client)
        self.interpreter = CommandInterpreter(client)
        self.gate = SessionGate(client)
        self.notice_seconds = notice_seconds
        self.users: List[str] = []
        self.groups: List[str] = []
        self._notice: Optional[Notice] = None

    @classmethod
    def from_settings(cls, settings: ConsoleSettings, transport=None) -> "ConsoleShell":
        client = EngineClient(settings.engine_url, timeout=settings.request_timeout, transport=transport)
        shell = cls(client, open_store(settings), notice_seconds=settings.notice_seconds)
        shell.registry.load()
        return shell

    async def aclose(self):
        await self.client.aclose()

    # ---------- NOTICES ----------
    def notify(self, text: str, kind: str = "info"):
        self._notice = Notice(text, kind, time.monotonic() + self.notice_seconds)

    def take_notice(self) -> Optional[Notice]:
        notice, self._notice = self._notice, None
        if notice is None or notice.expires_at < time.monotonic():
            return None
        return notice

    # ---------- COMMANDS ----------
    async def execute(self, script: str):
        result = await self.interpreter.execute(script)
        if isinstance(result, SessionEnded):
            self.gate.end_session()
            # file or etcd I/O, kept off the event loop
            await run_in_threadpool(self.registry.clear_disks)
        return result

    async def logout(self):
        return await self.execute(directives.logout())

    async def open_file(self, name: str) -> str:
        return await self.navigator.open_file(name, self.interpreter)

    # ---------- USERS AND GROUPS ----------
    async def refresh_users_groups(self):
        listing = await self.client.list_users_groups()
        self.users = list(listing.users)
        self.groups = list(listing.groups)
        return listing

    async def _manage(self, script: str, success: str):
        result = await self.execute(script)
        self.notify(success, "success")
        try:
            await self.refresh_users_groups()
        except ConsoleError as exc:
            logger.warning("users/groups refresh failed: %s", exc)
        return result

    async def create_user(self, user, password, group):
        return await self._manage(directives.mkusr(user, password, group), f"User {user} created")

    async def delete_user(self, user):
        return await self._manage(directives.rmusr(user), f"User {user} deleted")

    async def create_group(self, name):
        return await self._manage(directives.mkgrp(name), f"Group {name} created")

    async def delete_group(self, name):
        return await self._manage(directives.rmgrp(name), f"Group {name} deleted")

    async def change_group(self, user, group):
        return await self._manage(directives.chgrp(user, group), f"User {user} moved to {group}")
