"""
Hash Tree - Digest

Canonical root digest of a hash tree.

Digest Rules (Hard Contracts):
1. Empty:          sha256(domain_sep("ic-hashtree-empty"))
2. Leaf(v):        sha256(domain_sep("ic-hashtree-leaf") || v)
3. Pruned(d):      d (taken as given, never rehashed)
4. Labeled(l, t):  sha256(domain_sep("ic-hashtree-labeled") || l || digest(t))
5. Fork(a, b):     sha256(domain_sep("ic-hashtree-fork") || digest(a) || digest(b))

domain_sep(s) is one length byte followed by s, so the five node kinds hash
into disjoint domains and differently-shaped trees cannot collide.

Determinism Notes:
- Pure function of the tree; nothing is cached between calls
- Within one call, a node object reached twice is hashed once
"""
from __future__ import annotations

from statecert.crypto.hashing import hash_with_domain
from statecert.hashtree.tree import Empty, Fork, HashTree, Labeled, Leaf, Pruned


EMPTY_DOMAIN = "ic-hashtree-empty"
LEAF_DOMAIN = "ic-hashtree-leaf"
LABELED_DOMAIN = "ic-hashtree-labeled"
FORK_DOMAIN = "ic-hashtree-fork"

# Digest of the Empty node
EMPTY_DIGEST: bytes = hash_with_domain(EMPTY_DOMAIN)


def tree_digest(tree: HashTree) -> bytes:
    """
    Compute the 32-byte digest of a hash tree.

    The traversal is an explicit post-order walk, so deep trees do not hit
    the interpreter recursion limit.

    Args:
        tree: Root node

    Returns:
        32-byte SHA-256 digest

    Raises:
        TypeError: If a node is not one of the five hash-tree kinds
    """
    memo: dict[int, bytes] = {}
    stack: list[tuple[HashTree, bool]] = [(tree, False)]

    while stack:
        node, children_done = stack.pop()
        key = id(node)
        if key in memo:
            continue

        if isinstance(node, Empty):
            memo[key] = EMPTY_DIGEST
        elif isinstance(node, Leaf):
            memo[key] = hash_with_domain(LEAF_DOMAIN, node.value)
        elif isinstance(node, Pruned):
            memo[key] = node.digest
        elif isinstance(node, Labeled):
            if children_done:
                memo[key] = hash_with_domain(
                    LABELED_DOMAIN, node.label, memo[id(node.subtree)]
                )
            else:
                stack.append((node, True))
                stack.append((node.subtree, False))
        elif isinstance(node, Fork):
            if children_done:
                memo[key] = hash_with_domain(
                    FORK_DOMAIN, memo[id(node.left)], memo[id(node.right)]
                )
            else:
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        else:
            raise TypeError(f"Not a hash tree node: {type(node).__name__}")

    return memo[id(tree)]


__all__ = [
    "EMPTY_DIGEST",
    "EMPTY_DOMAIN",
    "LEAF_DOMAIN",
    "LABELED_DOMAIN",
    "FORK_DOMAIN",
    "tree_digest",
]
