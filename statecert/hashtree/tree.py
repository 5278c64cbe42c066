"""
Hash Tree - Node Model

A hash tree is an immutable value built from exactly five node kinds:

    Empty                    no data at this position
    Fork(left, right)        split point of a sorted label structure
    Labeled(label, subtree)  a named child
    Leaf(value)              terminal data
    Pruned(digest)           hidden subtree, only its 32-byte digest is known

Ordering invariant: under any Fork, every label reachable through `left`
sorts strictly before every label reachable through `right`.

The variant set is closed. Code that walks a tree dispatches on these five
classes and raises TypeError on anything else.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union


DIGEST_LENGTH = 32


@dataclass(frozen=True)
class Empty:
    """No data at this position."""


@dataclass(frozen=True)
class Fork:
    left: "HashTree"
    right: "HashTree"


@dataclass(frozen=True)
class Labeled:
    label: bytes
    subtree: "HashTree"

    def __post_init__(self) -> None:
        if not isinstance(self.label, bytes):
            raise TypeError(f"Label must be bytes, got {type(self.label).__name__}")


@dataclass(frozen=True)
class Leaf:
    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, bytes):
            raise TypeError(f"Leaf value must be bytes, got {type(self.value).__name__}")


@dataclass(frozen=True)
class Pruned:
    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, bytes) or len(self.digest) != DIGEST_LENGTH:
            raise ValueError(
                f"Pruned digest must be {DIGEST_LENGTH} bytes, got "
                f"{len(self.digest) if isinstance(self.digest, bytes) else type(self.digest).__name__}"
            )


HashTree = Union[Empty, Fork, Labeled, Leaf, Pruned]

NODE_TYPES = (Empty, Fork, Labeled, Leaf, Pruned)

Label = Union[bytes, str]


def as_label(label: Label) -> bytes:
    """Normalize a path segment: str is UTF-8 encoded, bytes pass through."""
    if isinstance(label, bytes):
        return label
    if isinstance(label, str):
        return label.encode("utf-8")
    raise TypeError(f"Label must be bytes or str, got {type(label).__name__}")


def as_path(path: Iterable[Label]) -> list[bytes]:
    return [as_label(segment) for segment in path]


# =============================================================================
# Construction helpers
# =============================================================================

def empty() -> Empty:
    return Empty()


def fork(left: HashTree, right: HashTree) -> Fork:
    return Fork(left, right)


def labeled(label: Label, subtree: HashTree) -> Labeled:
    return Labeled(as_label(label), subtree)


def leaf(value: bytes | str) -> Leaf:
    return Leaf(value.encode("utf-8") if isinstance(value, str) else value)


def pruned(digest: bytes) -> Pruned:
    return Pruned(digest)


def fork_all(nodes: Sequence[HashTree]) -> HashTree:
    """
    Join nodes left to right into a balanced chain of Forks.

    Callers pass nodes already sorted by label. Zero nodes give Empty and a
    single node is returned unchanged.
    """
    if not nodes:
        return Empty()
    if len(nodes) == 1:
        return nodes[0]
    mid = (len(nodes) + 1) // 2
    return Fork(fork_all(nodes[:mid]), fork_all(nodes[mid:]))


def labeled_map(entries: dict[Label, HashTree]) -> HashTree:
    """Build a sorted labeled structure from a {label: subtree} mapping."""
    items = sorted(((as_label(k), v) for k, v in entries.items()), key=lambda kv: kv[0])
    return fork_all([Labeled(k, v) for k, v in items])


__all__ = [
    "DIGEST_LENGTH",
    "Empty",
    "Fork",
    "Labeled",
    "Leaf",
    "Pruned",
    "HashTree",
    "NODE_TYPES",
    "Label",
    "as_label",
    "as_path",
    "empty",
    "fork",
    "labeled",
    "leaf",
    "pruned",
    "fork_all",
    "labeled_map",
]
