"""
Virtual Filesystem (VFS) for the Mission Control terminal.

A small tree of directory and file nodes built once at start-up and then
shared read-only by every terminal session.  `build_vfs()` returns the
default layout; hosts may build their own with `add_dir` / `add_file`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from core.geofences import GEOFENCES, Region
from core.paths import canonicalize, segments, split_path


@dataclass
class DirectoryNode:
    children: dict[str, "Node"] = field(default_factory=dict)
    kind: str = field(default="dir", init=False)


@dataclass
class FileNode:
    content: str = ""
    kind: str = field(default="file", init=False)


Node = Union[DirectoryNode, FileNode]


class VirtualFileSystem:
    """In-memory directory tree rooted at `/`."""

    def __init__(self, root: Optional[DirectoryNode] = None):
        self.root = root if root is not None else DirectoryNode()

    # ── Construction ──────────────────────────────────────────────────────────

    def add_dir(self, path: str) -> DirectoryNode:
        """Create `path` and any missing parents; return the directory node."""
        cur = self.root
        for seg in segments(canonicalize(path)):
            nxt = cur.children.get(seg)
            if nxt is None:
                nxt = cur.children[seg] = DirectoryNode()
            elif not isinstance(nxt, DirectoryNode):
                raise NotADirectoryError(path)
            cur = nxt
        return cur

    def add_file(self, path: str, content: str = "") -> FileNode:
        parent, name = split_path(path)
        if not name:
            raise IsADirectoryError(path)
        node = FileNode(content)
        self.add_dir(parent).children[name] = node
        return node

    # ── Queries ───────────────────────────────────────────────────────────────

    def get_node(self, path: str) -> Optional[Node]:
        cur: Node = self.root
        for seg in segments(canonicalize(path)):
            if not isinstance(cur, DirectoryNode):
                return None
            nxt = cur.children.get(seg)
            if nxt is None:
                return None
            cur = nxt
        return cur

    def exists(self, path: str) -> bool:
        return self.get_node(path) is not None

    def is_directory(self, path: str) -> bool:
        return isinstance(self.get_node(path), DirectoryNode)

    def is_file(self, path: str) -> bool:
        return isinstance(self.get_node(path), FileNode)

    def list_directory(self, path: str) -> Optional[list[str]]:
        """Child names in insertion order, or None if `path` is not a directory."""
        node = self.get_node(path)
        if not isinstance(node, DirectoryNode):
            return None
        return list(node.children)

    def read_file(self, path: str) -> Optional[str]:
        node = self.get_node(path)
        if not isinstance(node, FileNode):
            return None
        return node.content


# ── Default layout ────────────────────────────────────────────────────────────

DOCS_DIR = "/docs"

SYSTEM_DIRS = ["/bin", "/boot", "/dev", "/etc", "/home", "/usr",
               "/var", "/tmp", "/opt", "/sys", "/proc"]

README = "Welcome to Mission Control. Type help for commands."

EASTER_EGGS_GUIDE = (
    "Mission Control — Hidden Systems\n"
    "\n"
    "Keys:\n"
    "- Konami: Toggle Matrix rain\n"
    "- U: UFO fleet\n"
    "- D: Paw burst\n"
    "- G: Glitch header\n"
    "- P: Neon pulse\n"
    "- H: Hiking mode\n"
    "- V: Scanlines\n"
    "- B: UFO beam\n"
    "\n"
    "Terminals:\n"
    "- Map: regions, companies, goto, hq, probe\n"
    "- Briefing: eggs, trigger, puzzle\n"
)

SECRETS = (
    "CLASSIFIED // EYES ONLY\n"
    "Operator clearance confirmed.\n"
    "Hidden verbs: unlock-all, uxv, probe, puzzle.\n"
    "Watch the skies."
)


def build_vfs(regions: Sequence[Region] = GEOFENCES,
              companies: Sequence[str] = ()) -> VirtualFileSystem:
    """Return the default Mission Control filesystem."""
    vfs = VirtualFileSystem()
    vfs.add_file("/README.txt", README)
    for d in SYSTEM_DIRS:
        vfs.add_dir(d)
    vfs.add_file(DOCS_DIR + "/regions.txt", "\n".join(r.key for r in regions))
    vfs.add_file(DOCS_DIR + "/companies.txt", ", ".join(companies) or "(none)")
    vfs.add_file("/opt/easter-eggs.md", EASTER_EGGS_GUIDE)
    vfs.add_file("/secrets", SECRETS)
    return vfs
