"""A certified map: a red-black tree that can prove what it holds and what it lacks."""

from __future__ import annotations

import enum
import functools
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional

from .hashtree import Empty, HashTree, Pruned, empty_hash, labeled
from .node import (
    Node,
    delete,
    full_witness_tree,
    insert,
    iterate,
    three_way_fork,
    value_hash_tree,
)

NodeRenderer = Callable[[Node], HashTree]


class BoundKind(enum.Enum):
    """Whether a bound is the requested key itself or its nearest neighbour."""

    EXACT = "exact"
    NEIGHBOR = "neighbor"


@dataclass(frozen=True)
class KeyBound:
    """A key present in the tree that bounds a requested range."""

    kind: BoundKind
    key: bytes

    @property
    def is_exact(self) -> bool:
        return self.kind is BoundKind.EXACT


def _cmp(a: bytes, b: bytes) -> int:
    return (a > b) - (a < b)


def _bound_tree(bound: KeyBound, node: Node, f: NodeRenderer) -> HashTree:
    return f(node) if bound.is_exact else node.witness_tree()


@functools.total_ordering
class RbTree:
    """A mutable map from byte keys to values that maintains a Merkle root hash.

    Values are either bytes (hashed as leaves) or objects providing
    ``root_hash()`` and ``as_hash_tree()``, such as another ``RbTree``.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, items: Optional[Iterable[tuple[bytes, Any]]] = None) -> None:
        self._root: Optional[Node] = None
        for key, value in items or ():
            self.insert(key, value)

    def is_empty(self) -> bool:
        """True if the map holds no entries."""
        return self._root is None

    def get(self, key: bytes) -> Any:
        """Return the value stored under ``key``, or None."""
        key = bytes(key)
        node = self._root
        while node is not None:
            if key == node.key:
                return node.value
            node = node.left if key < node.key else node.right
        return None

    def modify(self, key: bytes, f: Callable[[Any], Any]) -> None:
        """Update the value under ``key`` with ``f`` and refresh the hashes.

        ``f`` receives the current value; if it returns something other than
        None, that becomes the new value, otherwise the (mutated) value is kept.
        Does nothing if the key is absent.
        """
        key = bytes(key)
        path: list[Node] = []
        node = self._root
        while node is not None:
            path.append(node)
            if key == node.key:
                replacement = f(node.value)
                if replacement is not None:
                    node.value = replacement
                break
            node = node.left if key < node.key else node.right
        else:
            # Key not found: the source still refreshes hashes along the path,
            # which leaves them unchanged.
            return
        for visited in reversed(path):
            visited.update_subtree_hash()

    def insert(self, key: bytes, value: Any) -> None:
        """Insert or replace the entry under ``key``."""
        self._root = insert(self._root, key, value)

    def delete(self, key: bytes) -> None:
        """Remove ``key`` from the map if it is present."""
        self._root = delete(self._root, key)

    def root_hash(self) -> bytes:
        """The root hash, equal to ``as_hash_tree().reconstruct()``."""
        if self._root is None:
            return empty_hash()
        return self._root.subtree_hash

    def as_hash_tree(self) -> HashTree:
        """The full hash tree with all keys and values."""
        return full_witness_tree(self._root, Node.data_tree)

    def witness(self, key: bytes) -> HashTree:
        """Proof that ``key`` is present, with its value, or proof of its absence."""
        return self.nested_witness(key, value_hash_tree)

    def nested_witness(self, key: bytes, f: Callable[[Any], HashTree]) -> HashTree:
        """Like ``witness``, but ``f`` builds the tree for the found value."""
        key = bytes(key)
        found = self._lookup_and_build_witness(key, f)
        if found is not None:
            return found
        return self._range_witness(
            self.lower_bound(key), self.upper_bound(key), Node.witness_tree
        )

    def keys(self) -> HashTree:
        """A witness enumerating every key, with values pruned."""
        return full_witness_tree(self._root, Node.witness_tree)

    def key_range(self, first: bytes, last: bytes) -> HashTree:
        """A witness for the keys in ``[first, last]``, with values pruned."""
        return self._range_witness(
            self.lower_bound(first), self.upper_bound(last), Node.witness_tree
        )

    def value_range(self, first: bytes, last: bytes) -> HashTree:
        """A witness for the entries in ``[first, last]``, with their values."""
        return self._range_witness(
            self.lower_bound(first), self.upper_bound(last), Node.data_tree
        )

    def keys_with_prefix(self, prefix: bytes) -> HashTree:
        """A witness enumerating all keys that start with ``prefix``."""
        return self._range_witness(
            self.lower_bound(prefix),
            self.right_prefix_neighbor(prefix),
            Node.witness_tree,
        )

    def lower_bound(self, key: bytes) -> Optional[KeyBound]:
        """The largest key not above ``key``."""
        key = bytes(key)

        def go(node: Optional[Node]) -> Optional[KeyBound]:
            if node is None:
                return None
            if node.key < key:
                return go(node.right) or KeyBound(BoundKind.NEIGHBOR, node.key)
            if node.key == key:
                return KeyBound(BoundKind.EXACT, node.key)
            return go(node.left)

        return go(self._root)

    def upper_bound(self, key: bytes) -> Optional[KeyBound]:
        """The smallest key not below ``key``."""
        key = bytes(key)

        def go(node: Optional[Node]) -> Optional[KeyBound]:
            if node is None:
                return None
            if node.key < key:
                return go(node.right)
            if node.key == key:
                return KeyBound(BoundKind.EXACT, node.key)
            return go(node.left) or KeyBound(BoundKind.NEIGHBOR, node.key)

        return go(self._root)

    def right_prefix_neighbor(self, prefix: bytes) -> Optional[KeyBound]:
        """The smallest key above every key that starts with ``prefix``."""
        prefix = bytes(prefix)

        def go(node: Optional[Node]) -> Optional[KeyBound]:
            if node is None:
                return None
            if node.key > prefix:
                if node.key.startswith(prefix):
                    return go(node.right)
                return go(node.left) or KeyBound(BoundKind.NEIGHBOR, node.key)
            return go(node.right)

        return go(self._root)

    def for_each(self, f: Callable[[bytes, Any], Any]) -> None:
        """Call ``f(key, value)`` for every entry in key order."""
        for key, value in iterate(self._root):
            f(key, value)

    def __iter__(self) -> Iterator[tuple[bytes, Any]]:
        return iterate(self._root)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RbTree):
            return NotImplemented
        return list(self) == list(other)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RbTree):
            return NotImplemented
        return list(self) < list(other)

    def __repr__(self) -> str:
        return "[" + ", ".join(f"({k!r}, {v!r})" for k, v in self) + "]"

    def _lookup_and_build_witness(
        self, key: bytes, f: Callable[[Any], HashTree]
    ) -> Optional[HashTree]:
        def go(node: Optional[Node]) -> Optional[HashTree]:
            if node is None:
                return None
            if key == node.key:
                return three_way_fork(
                    node.left_hash_tree(),
                    labeled(node.key, f(node.value)),
                    node.right_hash_tree(),
                )
            if key < node.key:
                subtree = go(node.left)
                if subtree is None:
                    return None
                return three_way_fork(
                    subtree, Pruned(node.data_hash()), node.right_hash_tree()
                )
            subtree = go(node.right)
            if subtree is None:
                return None
            return three_way_fork(
                node.left_hash_tree(), Pruned(node.data_hash()), subtree
            )

        return go(self._root)

    def _range_witness(
        self,
        left: Optional[KeyBound],
        right: Optional[KeyBound],
        f: NodeRenderer,
    ) -> HashTree:
        if left is None and right is None:
            return full_witness_tree(self._root, f)
        if right is None:
            return self._witness_range_above(left, f)
        if left is None:
            return self._witness_range_below(right, f)
        return self._witness_range_between(left, right, f)

    def _witness_range_above(self, lo: KeyBound, f: NodeRenderer) -> HashTree:
        def go(node: Optional[Node]) -> HashTree:
            if node is None:
                return Empty()
            order = _cmp(node.key, lo.key)
            if order == 0:
                return three_way_fork(
                    node.left_hash_tree(),
                    _bound_tree(lo, node, f),
                    full_witness_tree(node.right, f),
                )
            if order < 0:
                return three_way_fork(
                    node.left_hash_tree(), Pruned(node.data_hash()), go(node.right)
                )
            return three_way_fork(
                go(node.left), f(node), full_witness_tree(node.right, f)
            )

        return go(self._root)

    def _witness_range_below(self, hi: KeyBound, f: NodeRenderer) -> HashTree:
        def go(node: Optional[Node]) -> HashTree:
            if node is None:
                return Empty()
            order = _cmp(node.key, hi.key)
            if order == 0:
                return three_way_fork(
                    full_witness_tree(node.left, f),
                    _bound_tree(hi, node, f),
                    node.right_hash_tree(),
                )
            if order > 0:
                return three_way_fork(
                    go(node.left), Pruned(node.data_hash()), node.right_hash_tree()
                )
            return three_way_fork(
                full_witness_tree(node.left, f), f(node), go(node.right)
            )

        return go(self._root)

    def _witness_range_between(
        self, lo: KeyBound, hi: KeyBound, f: NodeRenderer
    ) -> HashTree:
        if lo.key > hi.key:
            raise ValueError(f"range start {lo.key!r} is above range end {hi.key!r}")

        def go(node: Optional[Node]) -> HashTree:
            if node is None:
                return Empty()
            k = node.key
            lo_k, k_hi = _cmp(lo.key, k), _cmp(k, hi.key)
            if lo_k < 0 and k_hi < 0:
                return three_way_fork(go(node.left), f(node), go(node.right))
            if lo_k == 0 and k_hi == 0:
                middle = (
                    f(node) if lo.is_exact or hi.is_exact else node.witness_tree()
                )
                return three_way_fork(
                    node.left_hash_tree(), middle, node.right_hash_tree()
                )
            if k_hi == 0:
                return three_way_fork(
                    go(node.left), _bound_tree(hi, node, f), node.right_hash_tree()
                )
            if lo_k == 0:
                return three_way_fork(
                    node.left_hash_tree(), _bound_tree(lo, node, f), go(node.right)
                )
            if lo_k < 0 and k_hi > 0:
                return three_way_fork(
                    go(node.left), Pruned(node.data_hash()), node.right_hash_tree()
                )
            if lo_k > 0 and k_hi < 0:
                return three_way_fork(
                    node.left_hash_tree(), Pruned(node.data_hash()), go(node.right)
                )
            return Pruned(node.subtree_hash)

        return go(self._root)