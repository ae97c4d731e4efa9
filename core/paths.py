"""
Path resolution for the virtual filesystem.

Every path handed to the VFS is canonical: absolute, no empty segments,
no `.` or `..`, and no trailing slash except for the root itself.
"""


def segments(path: str) -> list[str]:
    """Split a path into its non-empty segments (no normalisation)."""
    return [seg for seg in path.split("/") if seg]


def canonicalize(path: str) -> str:
    """Collapse `.`, `..` and repeated slashes; never climbs above `/`."""
    parts: list[str] = []
    for seg in segments(path):
        if seg == ".":
            continue
        if seg == "..":
            if parts:
                parts.pop()
            continue
        parts.append(seg)
    return "/" + "/".join(parts)


def resolve(cwd: str, candidate: str) -> str:
    """
    Resolve `candidate` against the working directory `cwd`.

    Absolute candidates ignore `cwd`; an empty candidate resolves to `cwd`
    itself.  The result is always canonical.
    """
    if not candidate:
        return canonicalize(cwd)
    if candidate.startswith("/"):
        return canonicalize(candidate)
    return canonicalize(cwd.rstrip("/") + "/" + candidate)


def split_path(path: str) -> tuple[str, str]:
    """Return (parent, name) of a path; the root's name is ''."""
    can = canonicalize(path)
    idx = can.rfind("/")
    parent = can[:idx] or "/"
    return parent, can[idx + 1:]


def is_within(path: str, root: str) -> bool:
    """True when `path` is `root` or lies underneath it."""
    path, root = canonicalize(path), canonicalize(root)
    if root == "/":
        return True
    return path == root or path.startswith(root + "/")
