"""
Certificate - Model and Document Codec

A Certificate is a hash tree plus a signature over its root digest.

Document form (used for the persisted artifact and by the HTTP source):

    {
      "format_version": "certificate.v1",
      "signature": "0x...",
      "tree": <node>
    }

Nodes are tagged arrays, the tags matching the wire encoding of the
certified-state tree:

    [0]                      Empty
    [1, <left>, <right>]     Fork
    [2, "0x<label>", <sub>]  Labeled
    [3, "0x<value>"]         Leaf
    [4, "0x<digest>"]        Pruned

Byte strings are 0x-prefixed lowercase hex.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from statecert.crypto.hashing import from_hex, to_hex
from statecert.hashtree.digest import tree_digest
from statecert.hashtree.tree import Empty, Fork, HashTree, Labeled, Leaf, Pruned
from statecert.schemas.errors import CertificateDecodeException


CERTIFICATE_FORMAT_VERSION = "certificate.v1"

TAG_EMPTY = 0
TAG_FORK = 1
TAG_LABELED = 2
TAG_LEAF = 3
TAG_PRUNED = 4

# array length per tag, tag included
_ARITY = {TAG_EMPTY: 1, TAG_FORK: 3, TAG_LABELED: 3, TAG_LEAF: 2, TAG_PRUNED: 2}


@dataclass(frozen=True)
class Certificate:
    """
    Signed view of certified state.

    Attributes:
        tree: The (partially pruned) state tree
        signature: Signature over domain_sep("ic-state-root") || digest(tree)
    """
    tree: HashTree
    signature: bytes

    @property
    def root_digest(self) -> bytes:
        return tree_digest(self.tree)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": CERTIFICATE_FORMAT_VERSION,
            "signature": to_hex(self.signature),
            "tree": tree_to_data(self.tree),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Certificate":
        """
        Decode a certificate document.

        Raises:
            CertificateDecodeException: On any structural problem
        """
        if not isinstance(data, dict):
            raise CertificateDecodeException("Certificate document must be an object")

        version = data.get("format_version")
        if version != CERTIFICATE_FORMAT_VERSION:
            raise CertificateDecodeException(
                f"Unsupported certificate format version: {version!r}",
                field_path="format_version",
            )

        if data.get("delegation") is not None:
            raise CertificateDecodeException(
                "Certificates with delegations are not supported",
                field_path="delegation",
            )

        unknown = set(data) - {"format_version", "signature", "tree", "delegation"}
        if unknown:
            raise CertificateDecodeException(
                f"Unexpected certificate fields: {sorted(unknown)}",
            )

        if "tree" not in data:
            raise CertificateDecodeException("Certificate has no tree", field_path="tree")

        signature = _decode_bytes(data.get("signature"), "signature")
        tree = tree_from_data(data["tree"], "tree")
        return cls(tree=tree, signature=signature)


# =============================================================================
# Tree <-> data
# =============================================================================

def tree_to_data(tree: HashTree) -> list[Any]:
    """Encode a hash tree into nested tagged lists (explicit stack, any depth)."""
    results: list[list[Any]] = []
    stack: list[tuple[HashTree, bool]] = [(tree, False)]

    while stack:
        node, children_done = stack.pop()
        if isinstance(node, Empty):
            results.append([TAG_EMPTY])
        elif isinstance(node, Leaf):
            results.append([TAG_LEAF, to_hex(node.value)])
        elif isinstance(node, Pruned):
            results.append([TAG_PRUNED, to_hex(node.digest)])
        elif isinstance(node, Labeled):
            if children_done:
                results.append([TAG_LABELED, to_hex(node.label), results.pop()])
            else:
                stack.append((node, True))
                stack.append((node.subtree, False))
        elif isinstance(node, Fork):
            if children_done:
                right = results.pop()
                left = results.pop()
                results.append([TAG_FORK, left, right])
            else:
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        else:
            raise TypeError(f"Not a hash tree node: {type(node).__name__}")

    return results[0]


def _decode_bytes(value: Any, field_path: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError as e:
        raise CertificateDecodeException(str(e), field_path=field_path) from e


def _render_path(root: str, link: Optional[tuple]) -> str:
    """Turn a (parent, index) chain into "tree[2][1]" form."""
    indices = []
    while link is not None:
        link, index = link
        indices.append(index)
    return root + "".join(f"[{i}]" for i in reversed(indices))


def tree_from_data(data: Any, field_path: str = "tree") -> HashTree:
    """
    Decode nested tagged lists into a hash tree.

    Walks the document with an explicit stack, so nesting depth is bounded
    by memory rather than by the interpreter recursion limit. Field paths
    are kept as parent links and only rendered for an error.

    Raises:
        CertificateDecodeException: On an unknown tag, wrong arity, bad hex
            or a pruned digest that is not 32 bytes
    """
    results: list[HashTree] = []
    # (node, path link, pending): pending is None until the node is expanded,
    # then the decoded label of a Labeled or b"" for a Fork
    stack: list[tuple[Any, Optional[tuple], Optional[bytes]]] = [(data, None, None)]

    def fail(message: str, link: Optional[tuple], *operand: int) -> CertificateDecodeException:
        for index in operand:
            link = (link, index)
        return CertificateDecodeException(message, field_path=_render_path(field_path, link))

    def decode_operand(node: list[Any], link: Optional[tuple]) -> bytes:
        try:
            return from_hex(node[1])
        except ValueError as e:
            raise fail(str(e), link, 1) from e

    while stack:
        node, link, pending = stack.pop()

        if pending is not None:
            if node[0] == TAG_FORK:
                right = results.pop()
                left = results.pop()
                results.append(Fork(left, right))
            else:
                results.append(Labeled(pending, results.pop()))
            continue

        if not isinstance(node, list) or not node:
            raise fail("Tree node must be a non-empty array", link)

        tag = node[0]
        if isinstance(tag, bool) or not isinstance(tag, int):
            raise fail("Tree node tag must be an integer", link)

        arity = _ARITY.get(tag)
        if arity is None:
            raise fail(f"Unknown tree node tag: {tag}", link)
        if len(node) != arity:
            raise fail(
                f"Node with tag {tag} must have {arity - 1} operand(s), got {len(node) - 1}",
                link,
            )

        if tag == TAG_EMPTY:
            results.append(Empty())
        elif tag == TAG_FORK:
            stack.append((node, link, b""))
            stack.append((node[2], (link, 2), None))
            stack.append((node[1], (link, 1), None))
        elif tag == TAG_LABELED:
            stack.append((node, link, decode_operand(node, link)))
            stack.append((node[2], (link, 2), None))
        elif tag == TAG_LEAF:
            results.append(Leaf(decode_operand(node, link)))
        else:
            digest = decode_operand(node, link)
            try:
                results.append(Pruned(digest))
            except ValueError as e:
                raise fail(str(e), link, 1) from e

    return results[0]


# =============================================================================
# LEB128
# =============================================================================

def decode_leb128(data: bytes) -> int:
    """
    Decode an unsigned LEB128 integer that spans exactly `data`.

    Raises:
        CertificateDecodeException: If the encoding is empty, truncated or
            has trailing bytes
    """
    result = 0
    shift = 0
    for index, byte in enumerate(data):
        result |= (byte & 0x7F) << shift
        shift += 7
        if not byte & 0x80:
            if index != len(data) - 1:
                raise CertificateDecodeException("Trailing bytes after LEB128 value")
            return result
    raise CertificateDecodeException("Truncated LEB128 value")


def encode_leb128(value: int) -> bytes:
    """Encode a non-negative integer as unsigned LEB128."""
    if value < 0:
        raise ValueError("LEB128 value must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


__all__ = [
    "CERTIFICATE_FORMAT_VERSION",
    "Certificate",
    "tree_to_data",
    "tree_from_data",
    "decode_leb128",
    "encode_leb128",
]
