"""
Hash Tree Digest Unit Tests
Tests for statecert/hashtree/digest.py

1. Known vector - the published example tree has a fixed root digest
2. Per-node rules - each node kind hashes under its own domain
3. Domain separation - crafted near-collisions between node kinds differ
4. Determinism - equal trees give equal digests, shared nodes are fine
5. Tamper sensitivity - any changed byte changes the root
"""
import pytest

from statecert.crypto.hashing import domain_sep, sha256
from statecert.hashtree.digest import EMPTY_DIGEST, tree_digest
from statecert.hashtree.tree import (
    Empty,
    Fork,
    Labeled,
    Leaf,
    Pruned,
    empty,
    fork,
    fork_all,
    labeled,
    labeled_map,
    leaf,
    pruned,
)


def example_tree():
    """The worked example published with the Internet Computer interface docs."""
    return fork(
        fork(
            labeled("a", fork(
                fork(labeled("x", leaf("hello")), empty()),
                labeled("y", leaf("world")),
            )),
            labeled("b", leaf("good")),
        ),
        fork(
            labeled("c", empty()),
            labeled("d", leaf("morning")),
        ),
    )


EXAMPLE_ROOT_HEX = "eb5c5b2195e62d996b84c9bcc8259d19a83786a2f59e0878cec84c811f669aa0"


class TestKnownVector:
    """The published example tree."""

    def test_example_tree_root(self):
        assert tree_digest(example_tree()).hex() == EXAMPLE_ROOT_HEX

    def test_pruning_preserves_root(self):
        """Replacing a subtree by Pruned(its digest) keeps the root digest."""
        full = example_tree()
        left_digest = tree_digest(full.left)
        partial = fork(pruned(left_digest), full.right)

        assert tree_digest(partial).hex() == EXAMPLE_ROOT_HEX

    def test_deep_pruning_preserves_root(self):
        full = example_tree()
        b_branch = full.left.right
        partial = fork(fork(full.left.left, pruned(tree_digest(b_branch))), full.right)

        assert tree_digest(partial) == tree_digest(full)


class TestNodeRules:
    """Each node kind follows its digest rule."""

    def test_empty(self):
        assert tree_digest(Empty()) == sha256(domain_sep("ic-hashtree-empty"))
        assert tree_digest(Empty()) == EMPTY_DIGEST

    def test_leaf(self):
        expected = sha256(domain_sep("ic-hashtree-leaf") + b"hello")
        assert tree_digest(Leaf(b"hello")) == expected

    def test_pruned_is_taken_as_given(self):
        digest = bytes(range(32))
        assert tree_digest(Pruned(digest)) == digest

    def test_labeled(self):
        sub = Leaf(b"v")
        expected = sha256(domain_sep("ic-hashtree-labeled") + b"k" + tree_digest(sub))
        assert tree_digest(Labeled(b"k", sub)) == expected

    def test_fork(self):
        a, b = Leaf(b"1"), Leaf(b"2")
        expected = sha256(domain_sep("ic-hashtree-fork") + tree_digest(a) + tree_digest(b))
        assert tree_digest(Fork(a, b)) == expected

    def test_digest_is_32_bytes(self):
        assert len(tree_digest(example_tree())) == 32


class TestDomainSeparation:
    """Near-collisions across node kinds never produce equal digests."""

    def test_fork_vs_labeled_with_coinciding_bytes(self):
        """Fork(a, b) and Labeled(digest(a), b) hash the same payload bytes."""
        a, b = Leaf(b"left"), Leaf(b"right")
        as_fork = Fork(a, b)
        as_labeled = Labeled(tree_digest(a), b)

        assert tree_digest(as_fork) != tree_digest(as_labeled)

    def test_leaf_vs_pruned(self):
        digest = sha256(b"anything")
        assert tree_digest(Leaf(digest)) != tree_digest(Pruned(digest))

    def test_empty_vs_empty_leaf(self):
        assert tree_digest(Empty()) != tree_digest(Leaf(b""))

    def test_leaf_vs_labeled_empty(self):
        assert tree_digest(Leaf(b"x")) != tree_digest(Labeled(b"x", Empty()))

    def test_fork_order_matters(self):
        a, b = Leaf(b"1"), Leaf(b"2")
        assert tree_digest(Fork(a, b)) != tree_digest(Fork(b, a))


class TestDeterminism:
    """Digests depend only on tree structure and content."""

    def test_equal_trees_equal_digests(self):
        assert tree_digest(example_tree()) == tree_digest(example_tree())

    def test_shared_subtree_objects(self):
        shared = labeled("k", leaf("v"))
        tree = Fork(shared, shared)
        rebuilt = Fork(labeled("k", leaf("v")), labeled("k", leaf("v")))

        assert tree_digest(tree) == tree_digest(rebuilt)

    def test_deep_tree_does_not_recurse(self):
        """A very deep chain of Labeled nodes still digests."""
        node = leaf("bottom")
        for i in range(5000):
            node = Labeled(b"l", node)

        assert len(tree_digest(node)) == 32

    def test_labeled_map_matches_manual_forks(self):
        built = labeled_map({"b": leaf("2"), "a": leaf("1")})
        manual = Fork(labeled("a", leaf("1")), labeled("b", leaf("2")))

        assert tree_digest(built) == tree_digest(manual)

    def test_fork_all_empty_is_empty(self):
        assert tree_digest(fork_all([])) == EMPTY_DIGEST


class TestTamperSensitivity:
    """Any changed byte changes the root."""

    def test_leaf_byte_flip(self):
        original = example_tree()
        tampered = fork(
            fork(
                labeled("a", fork(
                    fork(labeled("x", leaf("hellp")), empty()),
                    labeled("y", leaf("world")),
                )),
                labeled("b", leaf("good")),
            ),
            original.right,
        )
        assert tree_digest(tampered) != tree_digest(original)

    def test_label_change(self):
        assert tree_digest(labeled("a", leaf("v"))) != tree_digest(labeled("b", leaf("v")))


class TestNodeValidation:
    """Malformed nodes are rejected at construction."""

    def test_pruned_wrong_length(self):
        with pytest.raises(ValueError, match="32 bytes"):
            Pruned(b"\x00" * 31)

    def test_leaf_requires_bytes(self):
        with pytest.raises(TypeError):
            Leaf("text")

    def test_non_node_rejected(self):
        with pytest.raises(TypeError):
            tree_digest("not a node")
