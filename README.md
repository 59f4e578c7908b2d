# iccertified

Certified data structures for building verifiable responses, and the data
types used to describe ledger accounts and transfers.

- **Hash trees** (`iccertified.hashtree`): the `Empty`, `Fork`, `Labeled`,
  `Leaf` and `Pruned` nodes, root hash reconstruction with domain-separated
  SHA-256 (`fork_hash`, `leaf_hash`, `labeled_hash`, `empty_hash`), and CBOR
  encoding of a tree with `HashTree.to_cbor()`.
- **Certified maps** (`iccertified.rbtree`): `RbTree`, a left-leaning
  red-black tree over byte-string keys that keeps a running root hash and
  produces witnesses: proofs of presence or absence of a key, key ranges,
  value ranges and key prefixes. The tree nodes and balancing operations
  live in `iccertified.node`.
- **Ledger types** (`iccertified.ledger`, `iccertified.principal`): `Tokens`
  with overflow-checked arithmetic, `Subaccount`, `AccountIdentifier` with its
  CRC-32 check, `Memo`, `Timestamp`, `AccountBalanceArgs`, `TransferArgs`,
  the `TransferError` exceptions, and `Principal` with its textual encoding.

## Installation

```
pip install iccertified
```

## Hash trees

```python
from iccertified.hashtree import Empty, Leaf, fork, labeled

tree = fork(labeled(b"a", Leaf(b"hello")), labeled(b"b", Empty()))
digest = tree.reconstruct()   # 32-byte root hash
encoded = tree.to_cbor()      # CBOR bytes
```

`Pruned` and the hash functions accept only 32-byte hashes and raise
`ValueError` otherwise.

## Certified maps

```python
from iccertified.rbtree import RbTree

tree = RbTree([(b"b", b"x"), (b"d", b"y")])
tree.insert(b"f", b"z")

proof = tree.witness(b"d")
assert proof.reconstruct() == tree.root_hash()

absent = tree.witness(b"c")        # proof that b"c" is not present
keys = tree.key_range(b"a", b"e")  # labels only, values pruned
values = tree.value_range(b"a", b"e")
prefixed = tree.keys_with_prefix(b"d")

tree.delete(b"b")
print(list(tree))                  # [(b'd', b'y'), (b'f', b'z')]
```

Values are either bytes, hashed as leaves, or objects that provide
`root_hash()` and `as_hash_tree()`, such as another `RbTree`.
`nested_witness` builds a proof that reaches into an inner map:

```python
outer = RbTree()
outer.insert(b"top", RbTree([(b"bottom", b"data")]))
proof = outer.nested_witness(b"top", lambda inner: inner.witness(b"bottom"))
assert proof.reconstruct() == outer.root_hash()

outer.modify(b"top", lambda inner: inner.delete(b"bottom"))
```

`modify` passes the current value to the function; a non-`None` return
value replaces it, otherwise the mutated value is kept. Either way the
hashes along the path are refreshed. It does nothing if the key is absent.

Other members: `get`, `is_empty`, `keys`, `as_hash_tree`, `for_each`,
`lower_bound`, `upper_bound` and `right_prefix_neighbor` (which return a
`KeyBound` with a `BoundKind` of `EXACT` or `NEIGHBOR`, or `None`). Trees
compare equal, and order, by their sorted `(key, value)` pairs.

## Ledger types

```python
from iccertified.ledger import DEFAULT_SUBACCOUNT, AccountIdentifier, Tokens
from iccertified.principal import Principal

owner = Principal.from_text("ryjl3-tyaaa-aaaaa-aaaba-cai")
account = AccountIdentifier.new(owner, DEFAULT_SUBACCOUNT)
print(account)                           # 64 hex digits

print(Tokens.from_e8s(150_000_000))      # 1.50000000
```

- `Tokens` raises `OverflowError` when addition or subtraction leaves the
  unsigned 64-bit range; `Tokens.MAX`, `Tokens.ZERO` and `DEFAULT_FEE` are
  provided.
- `AccountIdentifier.from_bytes` raises `ValueError` when the CRC-32 checksum
  does not match.
- `Principal.from_text` raises `PrincipalError` for malformed or
  non-canonical text.
- `MAINNET_LEDGER_CANISTER_ID`, `MAINNET_GOVERNANCE_CANISTER_ID` and
  `MAINNET_CYCLES_MINTING_CANISTER_ID` are ready-made principals.
- `BadFee`, `InsufficientFunds`, `TxTooOld`, `TxCreatedInFuture` and
  `TxDuplicate` are `TransferError` exceptions with readable messages.

## What this package does not do

It contains no client: nothing here contacts a ledger or sends
`AccountBalanceArgs` or `TransferArgs` anywhere. It only provides the data
types and the hashing and witness logic; transport is up to you.

## Running the tests

```
pip install -e ".[test]"
pytest
```