"""Blocks, block headers, payloads, seals and entity identifiers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowsdk.collection import CollectionGuarantee

ID_LENGTH = 32

_HEX_PAIRS = re.compile(r"(?:[0-9a-fA-F]{2})*")


@dataclass(frozen=True)
class Identifier:
    """A 32 byte identifier of a Flow entity."""

    data: bytes = bytes(ID_LENGTH)

    def __post_init__(self) -> None:
        value = bytes(self.data)
        if len(value) != ID_LENGTH:
            raise ValueError(f"identifier must be {ID_LENGTH} bytes, got {len(value)}")
        object.__setattr__(self, "data", value)

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.hex()

    def hex(self) -> str:
        """Hex string representation without a prefix."""
        return self.data.hex()


EMPTY_ID = Identifier()


def _bytes_to_id(b: bytes) -> Identifier:
    return Identifier(bytes(b)[:ID_LENGTH].ljust(ID_LENGTH, b"\x00"))


def hex_to_id(h: str) -> Identifier:
    """Convert a hex string (with or without ``0x``) to an identifier.

    Decoding stops at the first invalid pair of characters; missing bytes are zero.
    """
    trimmed = h[2:] if h.startswith("0x") else h
    if len(trimmed) % 2 == 1:
        trimmed = "0" + trimmed
    return _bytes_to_id(bytes.fromhex(_HEX_PAIRS.match(trimmed).group()))


def hash_to_id(digest: bytes) -> Identifier:
    """Build an identifier from a hash digest."""
    return _bytes_to_id(digest)


@dataclass
class BlockHeader:
    """Summary of a full block."""

    id: Identifier = EMPTY_ID
    parent_id: Identifier = EMPTY_ID
    height: int = 0
    timestamp: datetime | None = None


@dataclass
class BlockSeal:
    """Attestation that the transactions of an earlier block have been verified."""

    block_id: Identifier = EMPTY_ID
    execution_receipt_id: Identifier = EMPTY_ID


@dataclass
class BlockPayload:
    """The collection guarantees and seals contained in a block."""

    collection_guarantees: list[CollectionGuarantee] = field(default_factory=list)
    seals: list[BlockSeal] = field(default_factory=list)


@dataclass
class Block:
    """A set of state mutations applied to the Flow blockchain."""

    header: BlockHeader = field(default_factory=BlockHeader)
    payload: BlockPayload = field(default_factory=BlockPayload)

    @property
    def id(self) -> Identifier:
        return self.header.id

    @property
    def parent_id(self) -> Identifier:
        return self.header.parent_id

    @property
    def height(self) -> int:
        return self.header.height

    @property
    def timestamp(self) -> datetime | None:
        return self.header.timestamp

    @property
    def collection_guarantees(self) -> list[CollectionGuarantee]:
        return self.payload.collection_guarantees

    @property
    def seals(self) -> list[BlockSeal]:
        return self.payload.seals