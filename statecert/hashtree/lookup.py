"""
Hash Tree - Lookup

Path queries over a hash tree that keep three outcomes apart:

    FOUND    the tree proves the value is present
    ABSENT   the label ordering proves nothing is stored at the path
    UNKNOWN  a pruned branch could hold the path; nothing can be concluded

plus ERROR when the tree has the wrong shape for the query (for example a
Leaf where a label was expected, or an interior node at the end of a path).

UNKNOWN is a valid answer, not a failure, and is never promoted to ABSENT.

Label search at one level (one path segment):
- Labeled(l, t): equal -> descend into t; target < l -> LESS; target > l -> GREATER
- Fork(a, b): search a; if the target sorts after everything in a, search b.
  GREATER from a followed by LESS from b proves the label falls in the gap
  between two neighbours, i.e. ABSENT. UNKNOWN from a stays UNKNOWN unless
  b decides.
- Pruned: UNKNOWN
- Empty: holds no labels
- Leaf: ERROR
At the top of a level, LESS / GREATER / no labels all mean ABSENT.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

from statecert.hashtree.tree import (
    Empty,
    Fork,
    HashTree,
    Label,
    Labeled,
    Leaf,
    Pruned,
    as_path,
)


class LookupStatus(str, Enum):
    """Outcome of a path lookup."""
    FOUND = "found"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"


@dataclass(frozen=True)
class LookupResult:
    """Result of lookup_path: `value` is set on FOUND, `reason` on ERROR."""
    status: LookupStatus
    value: Optional[bytes] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, value: bytes) -> "LookupResult":
        return cls(LookupStatus.FOUND, value=value)

    @classmethod
    def absent(cls) -> "LookupResult":
        return cls(LookupStatus.ABSENT)

    @classmethod
    def unknown(cls) -> "LookupResult":
        return cls(LookupStatus.UNKNOWN)

    @classmethod
    def error(cls, reason: str) -> "LookupResult":
        return cls(LookupStatus.ERROR, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass(frozen=True)
class SubtreeLookupResult:
    """Result of lookup_subtree: `tree` is set on FOUND, `reason` on ERROR."""
    status: LookupStatus
    tree: Optional[HashTree] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, tree: HashTree) -> "SubtreeLookupResult":
        return cls(LookupStatus.FOUND, tree=tree)

    @classmethod
    def absent(cls) -> "SubtreeLookupResult":
        return cls(LookupStatus.ABSENT)

    @classmethod
    def unknown(cls) -> "SubtreeLookupResult":
        return cls(LookupStatus.UNKNOWN)

    @classmethod
    def error(cls, reason: str) -> "SubtreeLookupResult":
        return cls(LookupStatus.ERROR, reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


# =============================================================================
# Single-level label search
# =============================================================================

class _Search(Enum):
    FOUND = "found"
    ABSENT = "absent"
    UNKNOWN = "unknown"
    ERROR = "error"
    LESS = "less"        # target sorts before every label here
    GREATER = "greater"  # target sorts after every label here
    NOTHING = "nothing"  # no labels here at all


def _match_node(node: HashTree, label: bytes) -> tuple[_Search, object]:
    """Search outcome for a non-Fork node."""
    if isinstance(node, Labeled):
        if label == node.label:
            return _Search.FOUND, node.subtree
        if label < node.label:
            return _Search.LESS, None
        return _Search.GREATER, None

    if isinstance(node, Pruned):
        return _Search.UNKNOWN, None

    if isinstance(node, Empty):
        return _Search.NOTHING, None

    if isinstance(node, Leaf):
        return _Search.ERROR, "expected a labeled node, found a leaf"

    raise TypeError(f"Not a hash tree node: {type(node).__name__}")


# continuation steps for the Fork search stack
_VISIT = "visit"                  # search the node, result goes to the register
_AFTER_LEFT = "after_left"        # left side done; decide whether to search the right node
_AFTER_GREATER = "after_greater"  # right side searched after GREATER on the left
_AFTER_UNKNOWN = "after_unknown"  # right side searched after UNKNOWN on the left


def _find_label(node: HashTree, label: bytes) -> tuple[_Search, object]:
    """
    Search one level for `label`. Payload is the subtree on FOUND, the reason on ERROR.

    Forks are walked with an explicit stack of continuations, so lopsided
    chains of any depth are searched without recursion.
    """
    result: tuple[_Search, object] = (_Search.NOTHING, None)
    stack: list[tuple[str, Optional[HashTree]]] = [(_VISIT, node)]

    while stack:
        step, item = stack.pop()

        if step == _VISIT:
            if isinstance(item, Fork):
                stack.append((_AFTER_LEFT, item.right))
                stack.append((_VISIT, item.left))
            else:
                result = _match_node(item, label)

        elif step == _AFTER_LEFT:
            left = result[0]
            if left is _Search.NOTHING:
                stack.append((_VISIT, item))
            elif left is _Search.GREATER:
                stack.append((_AFTER_GREATER, None))
                stack.append((_VISIT, item))
            elif left is _Search.UNKNOWN:
                stack.append((_AFTER_UNKNOWN, None))
                stack.append((_VISIT, item))
            # FOUND, ABSENT, ERROR and LESS are decided by the left side alone

        elif step == _AFTER_GREATER:
            right = result[0]
            if right is _Search.LESS:
                result = (_Search.ABSENT, None)
            elif right is _Search.NOTHING:
                result = (_Search.GREATER, None)

        elif step == _AFTER_UNKNOWN:
            if result[0] in (_Search.LESS, _Search.NOTHING):
                result = (_Search.UNKNOWN, None)

    return result


def _descend(tree: HashTree, path: list[bytes]) -> tuple[LookupStatus, object]:
    """Consume `path`; payload is the reached node on FOUND, the reason on ERROR."""
    node = tree
    for depth, label in enumerate(path):
        outcome, payload = _find_label(node, label)
        if outcome is _Search.FOUND:
            node = payload
            continue
        if outcome is _Search.UNKNOWN:
            return LookupStatus.UNKNOWN, None
        if outcome is _Search.ERROR:
            return LookupStatus.ERROR, f"{payload} at depth {depth}"
        return LookupStatus.ABSENT, None
    return LookupStatus.FOUND, node


# =============================================================================
# Public API
# =============================================================================

def lookup_path(tree: HashTree, path: Iterable[Label]) -> LookupResult:
    """
    Look up the leaf value stored at `path`.

    Args:
        tree: Root of the hash tree
        path: Label segments, bytes or str (str is UTF-8 encoded)

    Returns:
        LookupResult: FOUND(value) for a Leaf, ABSENT when proven missing
        (or the path ends at Empty), UNKNOWN when pruned, ERROR when the path
        ends at an interior node or crosses a Leaf
    """
    segments = as_path(path)
    status, payload = _descend(tree, segments)
    if status is LookupStatus.UNKNOWN:
        return LookupResult.unknown()
    if status is LookupStatus.ABSENT:
        return LookupResult.absent()
    if status is LookupStatus.ERROR:
        return LookupResult.error(payload)

    node = payload
    if isinstance(node, Leaf):
        return LookupResult.found(node.value)
    if isinstance(node, Empty):
        return LookupResult.absent()
    if isinstance(node, Pruned):
        return LookupResult.unknown()
    if isinstance(node, (Labeled, Fork)):
        return LookupResult.error(
            f"path resolves to an interior {type(node).__name__} node, not a leaf"
        )
    raise TypeError(f"Not a hash tree node: {type(node).__name__}")


def lookup_subtree(tree: HashTree, prefix: Iterable[Label]) -> SubtreeLookupResult:
    """
    Look up the subtree stored under `prefix`.

    Same traversal as lookup_path, but the node reached after the last
    segment is returned as-is, whatever its kind.
    """
    segments = as_path(prefix)
    status, payload = _descend(tree, segments)
    if status is LookupStatus.FOUND:
        return SubtreeLookupResult.found(payload)
    if status is LookupStatus.UNKNOWN:
        return SubtreeLookupResult.unknown()
    if status is LookupStatus.ERROR:
        return SubtreeLookupResult.error(payload)
    return SubtreeLookupResult.absent()


class PathListing:
    """
    Lazy listing of every label path that ends at a Leaf.

    Pruned subtrees are skipped, so the listing never claims completeness
    over data it cannot see. Iterating again starts a fresh walk.
    For diagnostics only; never use the listing to decide absence.
    """

    def __init__(self, tree: HashTree) -> None:
        self._tree = tree

    def __iter__(self) -> Iterator[list[bytes]]:
        # (node, labels-so-far); right pushed first so output is in label order
        stack: list[tuple[HashTree, tuple[bytes, ...]]] = [(self._tree, ())]
        while stack:
            node, prefix = stack.pop()
            if isinstance(node, Leaf):
                yield list(prefix)
            elif isinstance(node, Labeled):
                stack.append((node.subtree, prefix + (node.label,)))
            elif isinstance(node, Fork):
                stack.append((node.right, prefix))
                stack.append((node.left, prefix))
            elif isinstance(node, (Empty, Pruned)):
                continue
            else:
                raise TypeError(f"Not a hash tree node: {type(node).__name__}")


def list_paths(tree: HashTree) -> PathListing:
    """Return a restartable, lazy listing of leaf paths (see PathListing)."""
    return PathListing(tree)


__all__ = [
    "LookupStatus",
    "LookupResult",
    "SubtreeLookupResult",
    "PathListing",
    "lookup_path",
    "lookup_subtree",
    "list_paths",
]
