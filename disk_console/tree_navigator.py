import logging
from typing import Optional, Sequence, Tuple

from console_errors import ConsoleError, StaleNavigationError
from directives import cat
from engine_models import TreeNode, ViewNode

logger = logging.getLogger(__name__)


# ---------- PURE TREE FUNCTIONS ----------
def to_view(node: TreeNode) -> ViewNode:
    """Convert the engine's {name, isDir, children} tree into the view shape."""
    if node.is_dir:
        return ViewNode(
            name=node.name,
            type="folder",
            children=tuple(to_view(child) for child in node.children or ()),
        )
    return ViewNode(name=node.name, type="file")


def walk(snapshot: ViewNode, path: Sequence[str]) -> ViewNode:
    """Follow ``path`` from the root; raise StaleNavigationError if it breaks off."""
    node = snapshot
    for depth, segment in enumerate(path):
        if not node.is_folder:
            raise StaleNavigationError(path, depth)
        match = None
        for child in node.children or ():
            if child.name == segment:
                match = child
                break
        if match is None or not match.is_folder:
            raise StaleNavigationError(path, depth)
        node = match
    return node


def resolve(path: Sequence[str], snapshot: ViewNode) -> Tuple[ViewNode, Tuple[str, ...]]:
    """Deepest folder reachable along ``path`` and the prefix that reaches it."""
    try:
        return walk(snapshot, path), tuple(path)
    except StaleNavigationError as exc:
        prefix = tuple(path[:exc.resolved_depth])
        return walk(snapshot, prefix), prefix


def join_path(path: Sequence[str], name: Optional[str] = None) -> str:
    segments = list(path) + ([name] if name else [])
    return "/" + "/".join(segments)


class TreeNavigator:
    """Browses one partition through a tree snapshot fetched once per selection."""

    def __init__(self, client):
        self.client = client
        self.selection: Optional[Tuple[str, str]] = None
        self.snapshot: Optional[ViewNode] = None
        self.path: Tuple[str, ...] = ()
        self.file_content: Optional[str] = None
        self.error: Optional[str] = None
        self.loading = False
        self._generation = 0

    # ---------- FETCH ----------
    async def fetch_partition_tree(self, disk_path: str, partition_name: str, refresh=False) -> bool:
        key = (disk_path, partition_name)
        if key == self.selection and self.snapshot is not None and not refresh:
            return True

        if key != self.selection:
            # a new selection starts from the root of an empty view
            self.selection = key
            self.snapshot = None
            self.path = ()
            self.file_content = None
        self._generation += 1
        generation = self._generation
        self.error = None
        self.loading = True
        try:
            tree = await self.client.partition_tree(disk_path, partition_name)
        except ConsoleError as exc:
            if generation != self._generation:
                return False
            self.loading = False
            # whatever was on display stays there
            self.error = str(exc)
            logger.warning("tree fetch for %s:%s failed: %s", disk_path, partition_name, exc)
            return False

        if generation != self._generation:
            logger.debug("dropping tree of %s:%s, selection moved on", disk_path, partition_name)
            return False
        self.loading = False
        self.snapshot = to_view(tree)
        self.current_directory()
        logger.info("tree loaded for %s:%s", disk_path, partition_name)
        return True

    # ---------- NAVIGATION ----------
    def current_directory(self) -> Optional[ViewNode]:
        if self.snapshot is None:
            return None
        node, resolved = resolve(self.path, self.snapshot)
        if resolved != self.path:
            logger.debug("path %s not in snapshot, falling back to %s",
                         join_path(self.path), join_path(resolved))
            self.path = resolved
        return node

    def open_folder(self, name: str) -> Tuple[bool, str]:
        directory = self.current_directory()
        if directory is None:
            return False, "No partition tree loaded"
        for child in directory.children or ():
            if child.name == name and child.is_folder:
                self.path = self.path + (name,)
                self.file_content = None
                return True, f"Opened {join_path(self.path)}"
        return False, f"Folder not found: {name}"

    def open_breadcrumb(self, index: int) -> Tuple[str, ...]:
        if index < 0:
            return self.open_root()
        if index >= len(self.path):
            raise IndexError(f"breadcrumb {index} out of range")
        self.path = self.path[:index + 1]
        self.file_content = None
        return self.path

    def open_root(self) -> Tuple[str, ...]:
        self.path = ()
        self.file_content = None
        return self.path

    def go_to(self, path: Sequence[str]) -> Tuple[str, ...]:
        """Jump to an arbitrary path, keeping only the part that resolves."""
        self.path = tuple(path)
        self.file_content = None
        self.current_directory()
        return self.path

    # ---------- FILES ----------
    def file_path(self, name: str) -> str:
        return join_path(self.path, name)

    async def open_file(self, name: str, interpreter) -> str:
        """Read a file's contents with a ``cat`` directive."""
        result = await interpreter.execute(cat(self.file_path(name)))
        self.file_content = result.text
        return self.file_content
