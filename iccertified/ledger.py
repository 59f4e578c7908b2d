"""Ledger data types: token amounts, accounts and transfer arguments."""

from __future__ import annotations

import hashlib
import zlib
from dataclasses import dataclass
from typing import ClassVar, Optional

from .principal import Principal

_U64_MAX = 2**64 - 1
_ACCOUNT_ID_SIZE = 32
_SUBACCOUNT_SIZE = 32


def _check_u64(value: int, what: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{what} must be an int, got {type(value).__name__}")
    if not 0 <= value <= _U64_MAX:
        raise ValueError(f"{what} must fit in an unsigned 64-bit integer, got {value}")


def _crc32_be(data: bytes) -> bytes:
    return zlib.crc32(data).to_bytes(4, "big")


@dataclass(frozen=True, order=True)
class Timestamp:
    """Nanoseconds since the UNIX epoch, UTC."""

    timestamp_nanos: int

    def __post_init__(self) -> None:
        _check_u64(self.timestamp_nanos, "timestamp_nanos")


@dataclass(frozen=True, order=True)
class Tokens:
    """An amount of tokens counted in units of 10^-8."""

    e8s: int

    MAX: ClassVar[Tokens]
    ZERO: ClassVar[Tokens]
    SUBDIVIDABLE_BY: ClassVar[int] = 100_000_000

    def __post_init__(self) -> None:
        _check_u64(self.e8s, "e8s")

    @classmethod
    def from_e8s(cls, e8s: int) -> Tokens:
        """Build an amount from a number of 10^-8 tokens."""
        return cls(e8s)

    def __add__(self, other: object) -> Tokens:
        if not isinstance(other, Tokens):
            return NotImplemented
        total = self.e8s + other.e8s
        if total > _U64_MAX:
            raise OverflowError(
                f"Add Tokens {self.e8s} + {other.e8s} failed because the "
                "underlying u64 overflowed"
            )
        return Tokens(total)

    def __sub__(self, other: object) -> Tokens:
        if not isinstance(other, Tokens):
            return NotImplemented
        difference = self.e8s - other.e8s
        if difference < 0:
            raise OverflowError(
                f"Subtracting Tokens {self.e8s} - {other.e8s} failed because the "
                "underlying u64 underflowed"
            )
        return Tokens(difference)

    def __str__(self) -> str:
        whole, fraction = divmod(self.e8s, Tokens.SUBDIVIDABLE_BY)
        return f"{whole}.{fraction:08d}"


Tokens.MAX = Tokens(_U64_MAX)
Tokens.ZERO = Tokens(0)


@dataclass(frozen=True, order=True)
class Subaccount:
    """An arbitrary 32-byte array that selects one of a principal's accounts."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) != _SUBACCOUNT_SIZE:
            raise ValueError(
                f"subaccount must be {_SUBACCOUNT_SIZE} bytes, got {len(data)}"
            )
        object.__setattr__(self, "data", data)

    def __bytes__(self) -> bytes:
        return self.data


@dataclass(frozen=True, order=True)
class AccountIdentifier:
    """A 32-byte account address: a CRC-32 of the last 28 bytes, then a SHA-224."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) != _ACCOUNT_ID_SIZE:
            raise ValueError(
                f"account identifier must be {_ACCOUNT_ID_SIZE} bytes, got {len(data)}"
            )
        object.__setattr__(self, "data", data)

    @classmethod
    def new(cls, owner: Principal, subaccount: Subaccount) -> AccountIdentifier:
        """Derive the account identifier of ``owner``'s ``subaccount``."""
        hasher = hashlib.sha224()
        hasher.update(b"\x0aaccount-id")
        hasher.update(bytes(owner))
        hasher.update(bytes(subaccount))
        digest = hasher.digest()
        return cls(_crc32_be(digest) + digest)

    @classmethod
    def from_bytes(cls, data: bytes) -> AccountIdentifier:
        """Parse 32 bytes, verifying the embedded checksum."""
        data = bytes(data)
        if len(data) != _ACCOUNT_ID_SIZE:
            raise ValueError(
                f"account identifier must be {_ACCOUNT_ID_SIZE} bytes, got {len(data)}"
            )
        if data[:4] != _crc32_be(data[4:]):
            raise ValueError("CRC-32 checksum failed to verify")
        return cls(data)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.data.hex()


@dataclass(frozen=True, order=True)
class Memo:
    """A caller-chosen number attached to a transfer."""

    value: int

    def __post_init__(self) -> None:
        _check_u64(self.value, "memo")


@dataclass(frozen=True)
class AccountBalanceArgs:
    """Arguments of the ``account_balance`` call."""

    account: AccountIdentifier


@dataclass(frozen=True, kw_only=True)
class TransferArgs:
    """Arguments of the ``transfer`` call."""

    memo: Memo
    amount: Tokens
    fee: Tokens
    to: AccountIdentifier
    from_subaccount: Optional[Subaccount] = None
    created_at_time: Optional[Timestamp] = None


class TransferError(Exception):
    """An error returned by the ``transfer`` call."""

    def __str__(self) -> str:
        match self:
            case BadFee(expected_fee=fee):
                return f"transaction fee should be {fee}"
            case InsufficientFunds(balance=balance):
                return (
                    "the debit account doesn't have enough funds to complete the "
                    f"transaction, current balance: {balance}"
                )
            case TxTooOld(allowed_window_nanos=window):
                return f"transaction is older than {window // 1_000_000_000} seconds"
            case TxCreatedInFuture():
                return "transaction's created_at_time is in future"
            case TxDuplicate(duplicate_of=block):
                return (
                    "transaction is a duplicate of another transaction in block "
                    f"{block}"
                )
        return "transfer failed"


@dataclass(eq=True)
class BadFee(TransferError):
    expected_fee: Tokens


@dataclass(eq=True)
class InsufficientFunds(TransferError):
    balance: Tokens


@dataclass(eq=True)
class TxTooOld(TransferError):
    allowed_window_nanos: int


@dataclass(eq=True)
class TxCreatedInFuture(TransferError):
    pass


@dataclass(eq=True)
class TxDuplicate(TransferError):
    duplicate_of: int


DEFAULT_SUBACCOUNT = Subaccount(bytes(_SUBACCOUNT_SIZE))
DEFAULT_FEE = Tokens(10_000)

MAINNET_LEDGER_CANISTER_ID = Principal.from_slice(
    b"\x00\x00\x00\x00\x00\x00\x00\x02\x01\x01"
)
MAINNET_GOVERNANCE_CANISTER_ID = Principal.from_slice(
    b"\x00\x00\x00\x00\x00\x00\x00\x01\x01\x01"
)
MAINNET_CYCLES_MINTING_CANISTER_ID = Principal.from_slice(
    b"\x00\x00\x00\x00\x00\x00\x00\x04\x01\x01"
)