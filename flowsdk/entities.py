"""Transactions, events, results and execution results of the Flow network."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

from flowsdk.address import EMPTY_ADDRESS, Address
from flowsdk.block import EMPTY_ID, ID_LENGTH, Identifier

_HEX_PAIRS = re.compile(r"(?:[0-9a-fA-F]{2})*")

StateCommitment = Identifier


def hex_to_state_commitment(h: str) -> StateCommitment:
    """Convert a hex string to a 32 byte state commitment.

    Decoding stops at the first invalid pair of characters; the decoded bytes
    fill the commitment from the front and the rest stays zero.
    """
    decoded = bytes.fromhex(_HEX_PAIRS.match(h).group())
    return Identifier(decoded[:ID_LENGTH].ljust(ID_LENGTH, b"\x00"))


@dataclass
class ProposalKey:
    """The key that proposes a transaction and supplies its sequence number."""

    address: Address = EMPTY_ADDRESS
    key_index: int = 0
    sequence_number: int = 0


@dataclass
class TransactionSignature:
    """A signature over a transaction by one account key."""

    address: Address = EMPTY_ADDRESS
    key_index: int = 0
    signature: bytes = b""


@dataclass
class Transaction:
    """A full transaction submitted to the Flow network."""

    script: bytes = b""
    arguments: list[bytes] = field(default_factory=list)
    reference_block_id: Identifier = EMPTY_ID
    gas_limit: int = 0
    proposal_key: ProposalKey = field(default_factory=ProposalKey)
    payer: Address = EMPTY_ADDRESS
    authorizers: list[Address] = field(default_factory=list)
    payload_signatures: list[TransactionSignature] = field(default_factory=list)
    envelope_signatures: list[TransactionSignature] = field(default_factory=list)


class TransactionStatus(IntEnum):
    """Execution state of a transaction."""

    UNKNOWN = 0
    PENDING = 1
    FINALIZED = 2
    EXECUTED = 3
    SEALED = 4
    EXPIRED = 5

    def __str__(self) -> str:
        return self.name


@dataclass
class Event:
    """An event emitted by a transaction."""

    type: str = ""
    transaction_id: Identifier = EMPTY_ID
    transaction_index: int = 0
    event_index: int = 0
    value: Any = None
    payload: bytes = b""


@dataclass
class BlockEvents:
    """The events that occurred in one block."""

    block_id: Identifier = EMPTY_ID
    height: int = 0
    block_timestamp: datetime | None = None
    events: list[Event] = field(default_factory=list)


@dataclass
class TransactionResult:
    """The outcome of a transaction: status, error message and events."""

    status: TransactionStatus = TransactionStatus.UNKNOWN
    error: str | None = None
    events: list[Event] = field(default_factory=list)
    block_id: Identifier = EMPTY_ID

    @property
    def failed(self) -> bool:
        """True when the transaction reported an error."""
        return self.error is not None


@dataclass
class Chunk:
    """A chunk of an execution result."""

    collection_index: int = 0
    start_state: StateCommitment = EMPTY_ID
    event_collection: bytes = b""
    block_id: Identifier = EMPTY_ID
    total_computation_used: int = 0
    number_of_transactions: int = 0
    index: int = 0
    end_state: StateCommitment = EMPTY_ID


@dataclass
class ServiceEvent:
    """A service event emitted while executing a block."""

    type: str = ""
    payload: bytes = b""


@dataclass
class ExecutionResult:
    """The result of executing a block."""

    previous_result_id: Identifier = EMPTY_ID
    block_id: Identifier = EMPTY_ID
    chunks: list[Chunk] = field(default_factory=list)
    service_events: list[ServiceEvent] = field(default_factory=list)