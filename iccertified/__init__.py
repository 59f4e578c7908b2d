"""Certified hash trees, certified maps and ledger account types."""

__version__ = "0.1.0"

__all__ = ["hashtree", "ledger", "node", "principal", "rbtree"]