"""Principal identifiers and their textual form."""

from __future__ import annotations

import base64
import binascii
import zlib
from dataclasses import dataclass

MAX_LENGTH = 29
_CHECKSUM_SIZE = 4
_GROUP_SIZE = 5


class PrincipalError(ValueError):
    """Raised for malformed principals."""


def _checksum(data: bytes) -> bytes:
    return zlib.crc32(data).to_bytes(_CHECKSUM_SIZE, "big")


@dataclass(frozen=True, order=True)
class Principal:
    """An opaque identifier of up to 29 bytes."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        if len(data) > MAX_LENGTH:
            raise PrincipalError(
                f"principal is {len(data)} bytes, at most {MAX_LENGTH} allowed"
            )
        object.__setattr__(self, "data", data)

    @classmethod
    def from_slice(cls, data: bytes) -> Principal:
        """Build a principal from raw bytes."""
        return cls(bytes(data))

    @classmethod
    def from_text(cls, text: str) -> Principal:
        """Parse the dash-grouped, checksummed base32 form."""
        lowered = text.lower()
        compact = lowered.replace("-", "")
        padded = compact.upper() + "=" * (-len(compact) % 8)
        try:
            raw = base64.b32decode(padded)
        except (binascii.Error, ValueError) as exc:
            raise PrincipalError(f"invalid base32 text: {text!r}") from exc
        if len(raw) < _CHECKSUM_SIZE:
            raise PrincipalError(f"text is too short: {text!r}")
        checksum, data = raw[:_CHECKSUM_SIZE], raw[_CHECKSUM_SIZE:]
        if len(data) > MAX_LENGTH:
            raise PrincipalError(f"text is too long: {text!r}")
        if _checksum(data) != checksum:
            raise PrincipalError(f"checksum mismatch: {text!r}")
        principal = cls(data)
        if principal.to_text() != lowered:
            raise PrincipalError(f"text is not in canonical grouped form: {text!r}")
        return principal

    def to_text(self) -> str:
        """Render the dash-grouped, checksummed base32 form."""
        encoded = (
            base64.b32encode(_checksum(self.data) + self.data)
            .decode("ascii")
            .rstrip("=")
            .lower()
        )
        groups = [
            encoded[start : start + _GROUP_SIZE]
            for start in range(0, len(encoded), _GROUP_SIZE)
        ]
        return "-".join(groups)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.to_text()