import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import ValidationError as ModelError

from console_errors import BackendError, NetworkError
from engine_models import (
    AnalyzeReply,
    DiskReport,
    Partition,
    StatusReply,
    TreeNode,
    UsersGroups,
)

logger = logging.getLogger(__name__)


class EngineClient:
    """Async client for the remote disk engine."""

    def __init__(self, base_url="http://localhost:3000", timeout=10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self):
        await self.http.aclose()

    async def _request(self, method: str, path: str, failure: str, payload=None,
                       error_body: bool = False) -> dict:
        try:
            response = await self.http.request(method, path, json=payload)
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            logger.warning("%s %s answered %s", method, path, response.status_code)
            if error_body and isinstance(body, dict) and body.get("status") == "error":
                raise BackendError(str(body.get("message", failure)))
            raise NetworkError(failure)

        if not isinstance(body, dict):
            raise NetworkError(failure)
        if body.get("status") == "error":
            raise BackendError(str(body.get("message", failure)))
        return body

    # ---------- SESSION ----------
    async def check_partition(self) -> StatusReply:
        body = await self._request("GET", "/check-partition", "Could not check mounted partitions")
        return StatusReply.model_validate(body)

    async def login(self, username: str, password: str, user_id: str) -> StatusReply:
        body = await self._request(
            "POST", "/users/login", "Login request failed",
            {"username": username, "password": password, "id": user_id},
            error_body=True,
        )
        return StatusReply.model_validate(body)

    # ---------- COMMANDS ----------
    async def analyze(self, command: str) -> AnalyzeReply:
        body = await self._request(
            "POST", "/analyze", "Network or server error while executing the command",
            {"command": command},
        )
        return _parse(AnalyzeReply, body, "Malformed reply from /analyze")

    async def list_users_groups(self) -> UsersGroups:
        body = await self._request("GET", "/list-users-groups", "Could not list users and groups")
        return _parse(UsersGroups, body, "Malformed reply from /list-users-groups")

    # ---------- DISKS ----------
    async def read_disk(self, path: Optional[str] = None, paths: Optional[Sequence[str]] = None,
                        is_encrypted: bool = False, key: int = 0) -> DiskReport:
        if (path is None) == (paths is None):
            raise ValueError("pass exactly one of path or paths")
        payload = {"isEncrypted": is_encrypted, "key": key}
        if path is not None:
            payload["path"] = path
        else:
            payload["paths"] = list(paths)
        body = await self._request("POST", "/disk/read", "Could not read the disk", payload)
        return _parse(DiskReport, body, "Malformed reply from /disk/read")

    async def disk_partitions(self, path: str) -> List[Partition]:
        body = await self._request(
            "POST", "/disk/partitions", "Could not fetch the disk partitions", {"path": path}
        )
        try:
            return [Partition.model_validate(p) for p in body.get("partitions") or []]
        except ModelError as exc:
            raise NetworkError("Malformed reply from /disk/partitions") from exc

    async def partition_tree(self, disk_path: str, partition_name: str) -> TreeNode:
        body = await self._request(
            "POST", "/disk/partition/tree", "Could not fetch the partition tree",
            {"diskPath": disk_path, "partitionName": partition_name},
        )
        if not isinstance(body.get("tree"), dict):
            raise NetworkError("Malformed reply from /disk/partition/tree")
        return _parse(TreeNode, body["tree"], "Malformed reply from /disk/partition/tree")


def _parse(model, body, failure):
    try:
        return model.model_validate(body)
    except ModelError as exc:
        raise NetworkError(failure) from exc
