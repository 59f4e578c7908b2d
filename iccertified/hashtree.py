"""Merkle hash trees with domain-separated SHA-256 hashing."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

import cbor2

HASH_SIZE = 32


def _domain_sep(tag: str) -> Any:
    encoded = tag.encode()
    hasher = hashlib.sha256()
    hasher.update(bytes([len(encoded) & 0xFF]))
    hasher.update(encoded)
    return hasher


def _check_hash(value: bytes, what: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH_SIZE:
        raise ValueError(f"{what} must be {HASH_SIZE} bytes, got {len(value)}")
    return value


def fork_hash(left: bytes, right: bytes) -> bytes:
    """Hash of a fork node given the hashes of its two children."""
    hasher = _domain_sep("ic-hashtree-fork")
    hasher.update(_check_hash(left, "left hash"))
    hasher.update(_check_hash(right, "right hash"))
    return hasher.digest()


def leaf_hash(data: bytes) -> bytes:
    """Hash of a leaf holding ``data``."""
    hasher = _domain_sep("ic-hashtree-leaf")
    hasher.update(bytes(data))
    return hasher.digest()


def labeled_hash(label: bytes, content_hash: bytes) -> bytes:
    """Hash of a labeled node given its label and the hash of its content."""
    hasher = _domain_sep("ic-hashtree-labeled")
    hasher.update(bytes(label))
    hasher.update(_check_hash(content_hash, "content hash"))
    return hasher.digest()


def empty_hash() -> bytes:
    """Hash of the empty tree."""
    return _domain_sep("ic-hashtree-empty").digest()


class HashTree:
    """A node of a certified hash tree."""

    def reconstruct(self) -> bytes:
        """Compute the root hash of this tree."""
        match self:
            case Empty():
                return empty_hash()
            case Fork(left, right):
                return fork_hash(left.reconstruct(), right.reconstruct())
            case Labeled(label, tree):
                return labeled_hash(label, tree.reconstruct())
            case Leaf(data):
                return leaf_hash(data)
            case Pruned(digest):
                return digest
        raise TypeError(f"unknown hash tree node: {self!r}")

    def to_cbor(self) -> bytes:
        """Encode this tree as CBOR, in the certificate wire format."""
        return cbor2.dumps(self._cbor_value())

    def _cbor_value(self) -> list:
        match self:
            case Empty():
                return [0]
            case Fork(left, right):
                return [1, left._cbor_value(), right._cbor_value()]
            case Labeled(label, tree):
                return [2, label, tree._cbor_value()]
            case Leaf(data):
                return [3, data]
            case Pruned(digest):
                return [4, digest]
        raise TypeError(f"unknown hash tree node: {self!r}")


def _check_tree(value: object, what: str) -> None:
    if not isinstance(value, HashTree):
        raise TypeError(f"{what} must be a HashTree, got {type(value).__name__}")


@dataclass(frozen=True)
class Empty(HashTree):
    """The empty tree."""


@dataclass(frozen=True)
class Fork(HashTree):
    """A node with two subtrees."""

    left: HashTree
    right: HashTree

    def __post_init__(self) -> None:
        _check_tree(self.left, "left")
        _check_tree(self.right, "right")


@dataclass(frozen=True)
class Labeled(HashTree):
    """A subtree under a label."""

    label: bytes
    tree: HashTree

    def __post_init__(self) -> None:
        object.__setattr__(self, "label", bytes(self.label))
        _check_tree(self.tree, "tree")


@dataclass(frozen=True)
class Leaf(HashTree):
    """A leaf holding raw data."""

    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))


@dataclass(frozen=True)
class Pruned(HashTree):
    """A subtree replaced by its hash."""

    digest: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "digest", _check_hash(self.digest, "digest"))


def fork(left: HashTree, right: HashTree) -> Fork:
    """Build a fork of two trees."""
    return Fork(left, right)


def labeled(label: bytes, tree: HashTree) -> Labeled:
    """Put ``tree`` under ``label``."""
    return Labeled(label, tree)