"""
Hash Tree - Node Model, Digest and Lookup

Certified state is exposed as a labeled hash tree. This package provides:
- The five node kinds: Empty, Fork, Labeled, Leaf, Pruned
- tree_digest: canonical, domain-separated root digest
- lookup_path / lookup_subtree: path queries distinguishing found, absent
  and unknown (pruned)
- list_paths: diagnostic listing of leaf paths

Usage:
    from statecert.hashtree import labeled, leaf, fork, lookup_path, tree_digest

    tree = fork(labeled("a", leaf("1")), labeled("b", leaf("2")))
    lookup_path(tree, ["a"])   # LookupResult(status=FOUND, value=b"1")
    lookup_path(tree, ["c"])   # LookupResult(status=ABSENT)
    root = tree_digest(tree)
"""
from .tree import (
    DIGEST_LENGTH,
    Empty,
    Fork,
    HashTree,
    Label,
    Labeled,
    Leaf,
    Pruned,
    as_label,
    as_path,
    empty,
    fork,
    fork_all,
    labeled,
    labeled_map,
    leaf,
    pruned,
)
from .digest import (
    EMPTY_DIGEST,
    tree_digest,
)
from .lookup import (
    LookupResult,
    LookupStatus,
    PathListing,
    SubtreeLookupResult,
    list_paths,
    lookup_path,
    lookup_subtree,
)

__all__ = [
    # Node model
    "DIGEST_LENGTH",
    "Empty",
    "Fork",
    "HashTree",
    "Label",
    "Labeled",
    "Leaf",
    "Pruned",
    "as_label",
    "as_path",
    "empty",
    "fork",
    "fork_all",
    "labeled",
    "labeled_map",
    "leaf",
    "pruned",
    # Digest
    "EMPTY_DIGEST",
    "tree_digest",
    # Lookup
    "LookupResult",
    "LookupStatus",
    "PathListing",
    "SubtreeLookupResult",
    "list_paths",
    "lookup_path",
    "lookup_subtree",
]
