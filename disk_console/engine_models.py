from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------- DISKS ----------
class DiskEntry(WireModel):
    display_name: str = Field(alias="displayName")
    file_path: str = Field(alias="filePath")


class Partition(WireModel):
    name: str
    size: int = 0
    type: str = ""
    fit: str = ""
    start: int = 0
    status: str = ""


class MbrPartition(WireModel):
    index: int
    type: str = ""
    start: int = 0
    size: int = 0
    name: str = ""
    logical_partitions: Optional[List[dict]] = Field(default=None, alias="logicalPartitions")


class DiskReport(WireModel):
    disk_signature: Optional[int] = Field(default=None, alias="diskSignature")
    disk_size: Optional[int] = Field(default=None, alias="diskSize")
    partitions: List[MbrPartition] = []
    disks: List[dict] = []


# ---------- TREES ----------
class TreeNode(WireModel):
    """Directory tree node as the engine sends it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    is_dir: bool = Field(alias="isDir")
    children: Optional[tuple["TreeNode", ...]] = None


class ViewNode(WireModel):
    """Directory tree node as the console displays it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    type: Literal["file", "folder"]
    children: Optional[tuple["ViewNode", ...]] = None

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


TreeNode.model_rebuild()
ViewNode.model_rebuild()


# ---------- REPLIES ----------
class StatusReply(WireModel):
    status: str = ""
    message: str = ""


class AnalyzeReply(WireModel):
    results: List[str] = []
    session_ended: Optional[bool] = Field(default=None, alias="sessionEnded")


class UsersGroups(WireModel):
    users: List[str] = []
    groups: List[str] = []
