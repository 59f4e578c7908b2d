"""Nodes of a left-leaning red-black tree that keep Merkle hashes of their subtrees."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from .hashtree import (
    Empty,
    HashTree,
    Leaf,
    Pruned,
    fork,
    fork_hash,
    labeled,
    labeled_hash,
    leaf_hash,
)

_BYTES_TYPES = (bytes, bytearray, memoryview)


class Color(enum.Enum):
    """Colour of a red-black tree node."""

    RED = "red"
    BLACK = "black"

    def flipped(self) -> Color:
        """Return the other colour."""
        return Color.BLACK if self is Color.RED else Color.RED


def value_root_hash(value: Any) -> bytes:
    """Root hash of a stored value: a leaf for bytes, else the value's own root hash."""
    if isinstance(value, _BYTES_TYPES):
        return leaf_hash(bytes(value))
    return value.root_hash()


def value_hash_tree(value: Any) -> HashTree:
    """Hash tree of a stored value: a leaf for bytes, else the value's own tree."""
    if isinstance(value, _BYTES_TYPES):
        return Leaf(bytes(value))
    return value.as_hash_tree()


@dataclass(eq=False)
class Node:
    """A tree node; ``subtree_hash`` covers the node and all its descendants."""

    key: bytes
    value: Any
    left: Optional[Node] = None
    right: Optional[Node] = None
    color: Color = Color.RED
    subtree_hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.key = bytes(self.key)
        self.subtree_hash = self.compute_subtree_hash()

    def data_hash(self) -> bytes:
        """Hash of this node's own key and value."""
        return labeled_hash(self.key, value_root_hash(self.value))

    def compute_subtree_hash(self) -> bytes:
        """Compute the hash of the full tree rooted at this node."""
        own = self.data_hash()
        match (self.left, self.right):
            case (None, None):
                return own
            case (left, None):
                return fork_hash(left.subtree_hash, own)
            case (None, right):
                return fork_hash(own, right.subtree_hash)
            case (left, right):
                return fork_hash(left.subtree_hash, fork_hash(own, right.subtree_hash))
        raise AssertionError("unreachable")

    def update_subtree_hash(self) -> None:
        """Recompute the cached subtree hash."""
        self.subtree_hash = self.compute_subtree_hash()

    def data_tree(self) -> HashTree:
        """The key labelling the value's full hash tree."""
        return labeled(self.key, value_hash_tree(self.value))

    def witness_tree(self) -> HashTree:
        """The key labelling the pruned value."""
        return labeled(self.key, Pruned(value_root_hash(self.value)))

    def left_hash_tree(self) -> HashTree:
        """The left subtree pruned to its hash, or empty."""
        return Empty() if self.left is None else Pruned(self.left.subtree_hash)

    def right_hash_tree(self) -> HashTree:
        """The right subtree pruned to its hash, or empty."""
        return Empty() if self.right is None else Pruned(self.right.subtree_hash)


def three_way_fork(left: HashTree, middle: HashTree, right: HashTree) -> HashTree:
    """Join three trees, folding empty sides and collapsing pruned ones."""
    match (left, middle, right):
        case (Empty(), _, Empty()):
            return middle
        case (_, _, Empty()):
            return fork(left, middle)
        case (Empty(), _, _):
            return fork(middle, right)
        case (Pruned(lhash), Pruned(mhash), Pruned(rhash)):
            return Pruned(fork_hash(lhash, fork_hash(mhash, rhash)))
        case (_, Pruned(mhash), Pruned(rhash)):
            return fork(left, Pruned(fork_hash(mhash, rhash)))
    return fork(left, fork(middle, right))


def full_witness_tree(
    node: Optional[Node], f: Callable[[Node], HashTree]
) -> HashTree:
    """Hash tree of every node under ``node``, each rendered by ``f``."""
    if node is None:
        return Empty()
    return three_way_fork(
        full_witness_tree(node.left, f), f(node), full_witness_tree(node.right, f)
    )


def is_red(node: Optional[Node]) -> bool:
    """True if ``node`` exists and is red."""
    return node is not None and node.color is Color.RED


def rotate_right(node: Node) -> Node:
    """Make a left-leaning red link lean to the right."""
    if not is_red(node.left):
        raise ValueError("rotate_right needs a red left child")
    x = node.left
    node.left = x.right
    node.update_subtree_hash()
    x.right = node
    x.color = node.color
    node.color = Color.RED
    x.update_subtree_hash()
    return x


def rotate_left(node: Node) -> Node:
    """Make a right-leaning red link lean to the left."""
    if not is_red(node.right):
        raise ValueError("rotate_left needs a red right child")
    x = node.right
    node.right = x.left
    node.update_subtree_hash()
    x.left = node
    x.color = node.color
    node.color = Color.RED
    x.update_subtree_hash()
    return x


def flip_colors(node: Node) -> None:
    """Flip the colours of a node and both its children."""
    if node.left is None or node.right is None:
        raise ValueError("flip_colors needs both children")
    node.color = node.color.flipped()
    node.left.color = node.left.color.flipped()
    node.right.color = node.right.color.flipped()


def balance(node: Node) -> Node:
    """Restore the left-leaning red-black invariants at ``node``."""
    if is_red(node.right) and not is_red(node.left):
        node = rotate_left(node)
    if is_red(node.left) and is_red(node.left.left):
        node = rotate_right(node)
    if is_red(node.left) and is_red(node.right):
        flip_colors(node)
    return node


def _insert(node: Optional[Node], key: bytes, value: Any) -> Node:
    if node is None:
        return Node(key, value)
    if key == node.key:
        node.value = value
    elif key < node.key:
        node.left = _insert(node.left, key, value)
    else:
        node.right = _insert(node.right, key, value)
    node.update_subtree_hash()
    return balance(node)


def insert(root: Optional[Node], key: bytes, value: Any) -> Node:
    """Insert or replace ``key`` under ``root``; return the new root."""
    new_root = _insert(root, bytes(key), value)
    new_root.color = Color.BLACK
    return new_root


def _contains(node: Optional[Node], key: bytes) -> bool:
    while node is not None:
        if key == node.key:
            return True
        node = node.left if key < node.key else node.right
    return False


def _move_red_left(node: Node) -> Node:
    flip_colors(node)
    if is_red(node.right.left):
        node.right = rotate_right(node.right)
        node = rotate_left(node)
        flip_colors(node)
    return node


def _move_red_right(node: Node) -> Node:
    flip_colors(node)
    if is_red(node.left.left):
        node = rotate_right(node)
        flip_colors(node)
    return node


def _min_node(node: Node) -> Node:
    while node.left is not None:
        node = node.left
    return node


def _delete_min(node: Node) -> Optional[Node]:
    if node.left is None:
        return None
    if not is_red(node.left) and not is_red(node.left.left):
        node = _move_red_left(node)
    node.left = _delete_min(node.left)
    node.update_subtree_hash()
    return balance(node)


def _delete(node: Node, key: bytes) -> Optional[Node]:
    if key < node.key:
        if not is_red(node.left) and not is_red(node.left.left):
            node = _move_red_left(node)
        node.left = _delete(node.left, key)
    else:
        if is_red(node.left):
            node = rotate_right(node)
        if key == node.key and node.right is None:
            return None
        if not is_red(node.right) and not is_red(node.right.left):
            node = _move_red_right(node)
        if key == node.key:
            smallest = _min_node(node.right)
            node.key, smallest.key = smallest.key, node.key
            node.value, smallest.value = smallest.value, node.value
            node.right = _delete_min(node.right)
        else:
            node.right = _delete(node.right, key)
    node.update_subtree_hash()
    return balance(node)


def delete(root: Optional[Node], key: bytes) -> Optional[Node]:
    """Remove ``key`` from under ``root`` if present; return the new root."""
    key = bytes(key)
    if root is None or not _contains(root, key):
        return root
    if not is_red(root.left) and not is_red(root.right):
        root.color = Color.RED
    new_root = _delete(root, key)
    if new_root is not None:
        new_root.color = Color.BLACK
    return new_root


def iterate(node: Optional[Node]) -> Iterator[tuple[bytes, Any]]:
    """Yield ``(key, value)`` pairs in key order."""
    stack: list[Node] = []
    while stack or node is not None:
        while node is not None:
            stack.append(node)
            node = node.left
        node = stack.pop()
        yield node.key, node.value
        node = node.right


def is_balanced(root: Optional[Node]) -> bool:
    """Check that no red node has a red child and all paths have equal black height."""

    def check(node: Optional[Node], blacks_left: int) -> bool:
        if node is None:
            return blacks_left == 0
        if is_red(node):
            if is_red(node.left) or is_red(node.right):
                return False
        else:
            if blacks_left == 0:
                return False
            blacks_left -= 1
        return check(node.left, blacks_left) and check(node.right, blacks_left)

    black_height = 0
    node = root
    while node is not None:
        if not is_red(node):
            black_height += 1
        node = node.left
    return check(root, black_height)