"""Conversion between access API models and Flow entities."""

from __future__ import annotations

import base64
import binascii
import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from flowsdk.access import models
from flowsdk.account import Account, AccountKey, HashAlgorithm, SignatureAlgorithm
from flowsdk.address import Address, hex_to_address
from flowsdk.block import Block, BlockHeader, BlockPayload, BlockSeal, hex_to_id
from flowsdk.collection import Collection, CollectionGuarantee
from flowsdk.entities import (
    BlockEvents,
    Chunk,
    Event,
    ExecutionResult,
    ProposalKey,
    ServiceEvent,
    Transaction,
    TransactionResult,
    TransactionSignature,
    TransactionStatus,
    hex_to_state_commitment,
)

_MAX_UINT64 = (1 << 64) - 1
_MAX_INT64 = (1 << 63) - 1
_MIN_INT64 = -(1 << 63)
_MAX_UINT16 = 0xFFFF

_UNSIGNED = re.compile(r"[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_STATUSES = {
    models.TransactionStatus.PENDING: TransactionStatus.PENDING,
    models.TransactionStatus.SEALED: TransactionStatus.SEALED,
    models.TransactionStatus.FINALIZED: TransactionStatus.FINALIZED,
    models.TransactionStatus.EXECUTED: TransactionStatus.EXECUTED,
    models.TransactionStatus.EXPIRED: TransactionStatus.EXPIRED,
}


def _b64decode(text: str) -> bytes:
    """Strict standard base64 decoding; raises ``ValueError`` on bad input."""
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"illegal base64 data: {exc}") from exc


def _b64encode(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def _to_uint(value: str) -> int:
    """Parse an unsigned decimal; invalid input gives 0, overflow saturates."""
    if not _UNSIGNED.fullmatch(value or ""):
        return 0
    return min(int(value), _MAX_UINT64)


def _to_int(value: str) -> int:
    """Parse a signed decimal; invalid input gives 0, overflow saturates."""
    if not _SIGNED.fullmatch(value or ""):
        return 0
    return max(_MIN_INT64, min(int(value), _MAX_INT64))


def to_address(address: str) -> Address:
    """Convert a hex address string into an :class:`Address`."""
    return hex_to_address(address)


def _decode_public_key(text: str) -> bytes:
    trimmed = text[2:] if text.startswith("0x") else text
    try:
        return bytes.fromhex(trimmed)
    except ValueError:
        return b""


def to_keys(keys: Iterable[models.AccountPublicKey]) -> list[AccountKey]:
    """Convert API account keys into account keys."""
    account_keys = []
    for key in keys:
        sig_algo = (
            SignatureAlgorithm.from_string(str(key.signing_algorithm))
            if key.signing_algorithm is not None
            else SignatureAlgorithm.UNKNOWN
        )
        hash_algo = (
            HashAlgorithm.from_string(str(key.hashing_algorithm))
            if key.hashing_algorithm is not None
            else HashAlgorithm.UNKNOWN
        )
        account_keys.append(
            AccountKey(
                index=_to_int(key.index),
                public_key=_decode_public_key(key.public_key),
                sig_algo=sig_algo,
                hash_algo=hash_algo,
                weight=_to_int(key.weight),
                sequence_number=_to_uint(key.sequence_number),
                revoked=key.revoked,
            )
        )
    return account_keys


def to_contracts(contracts: Mapping[str, str]) -> dict[str, bytes]:
    """Decode base64 contract sources keyed by contract name."""
    return {name: _b64decode(code) for name, code in contracts.items()}


def to_account(account: models.Account) -> Account:
    """Convert an API account into an :class:`Account`."""
    contracts = to_contracts(account.contracts)
    return Account(
        address=to_address(account.address),
        balance=_to_uint(account.balance),
        keys=to_keys(account.keys),
        contracts=contracts,
    )


def to_block_header(header: models.BlockHeader) -> BlockHeader:
    """Convert an API block header."""
    return BlockHeader(
        id=hex_to_id(header.id),
        parent_id=hex_to_id(header.parent_id),
        height=_to_uint(header.height),
        timestamp=header.timestamp,
    )


def to_collection_guarantees(
    guarantees: Iterable[models.CollectionGuarantee],
) -> list[CollectionGuarantee]:
    """Convert API collection guarantees."""
    return [CollectionGuarantee(collection_id=hex_to_id(g.collection_id)) for g in guarantees]


def to_block_seals(seals: Iterable[models.BlockSeal]) -> list[BlockSeal]:
    """Convert API block seals, checking that verifier signatures are valid base64."""
    flow_seals = []
    for seal in seals:
        for aggregated in seal.aggregated_approval_signatures:
            for signature in aggregated.verifier_signatures:
                _b64decode(signature)
        flow_seals.append(
            BlockSeal(
                block_id=hex_to_id(seal.block_id),
                execution_receipt_id=hex_to_id(seal.result_id),
            )
        )
    return flow_seals


def to_block_payload(payload: models.BlockPayload) -> BlockPayload:
    """Convert an API block payload."""
    seals = to_block_seals(payload.block_seals)
    return BlockPayload(
        collection_guarantees=to_collection_guarantees(payload.collection_guarantees),
        seals=seals,
    )


def to_block(block: models.Block) -> Block:
    """Convert an API block."""
    payload = to_block_payload(block.payload or models.BlockPayload())
    return Block(
        header=to_block_header(block.header or models.BlockHeader()),
        payload=payload,
    )


def to_blocks(blocks: Iterable[models.Block]) -> list[Block]:
    """Convert a list of API blocks."""
    return [to_block(block) for block in blocks]


def to_collection(collection: models.Collection) -> Collection:
    """Convert an API collection into the IDs of its transactions."""
    return Collection(transaction_ids=[hex_to_id(tx.id) for tx in collection.transactions])


def encode_script(script: bytes) -> str:
    """Base64-encode a script."""
    return _b64encode(script or b"")


def to_script(script: str) -> bytes:
    """Decode a base64 script."""
    return _b64decode(script)


def encode_args(args: Iterable[bytes]) -> list[str]:
    """Base64-encode raw arguments."""
    return [_b64encode(arg) for arg in args]


def to_args(arguments: Iterable[str]) -> list[bytes]:
    """Decode base64 arguments."""
    return [_b64decode(arg) for arg in arguments]


def _to_json_cadence(value: Any) -> Any:
    if isinstance(value, Mapping):
        if "type" not in value:
            raise ValueError("JSON-Cadence value must have a 'type' field")
        return dict(value)
    if value is None:
        return {"type": "Optional", "value": None}
    if isinstance(value, bool):
        return {"type": "Bool", "value": value}
    if isinstance(value, int):
        return {"type": "Int", "value": str(value)}
    if isinstance(value, str):
        return {"type": "String", "value": value}
    if isinstance(value, (list, tuple)):
        return {"type": "Array", "value": [_to_json_cadence(item) for item in value]}
    raise TypeError(f"cannot convert value of type {type(value).__name__} to a Cadence value")


def _dump_json_cadence(value: Any) -> bytes:
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return (text + "\n").encode("utf-8")


def encode_cadence_args(args: Iterable[Any]) -> list[str]:
    """Encode arguments as base64 JSON-Cadence.

    Each argument is either a JSON-Cadence value (a mapping with ``type``) or a
    plain ``str``, ``int``, ``bool``, ``None`` or list of such values.
    """
    return [_b64encode(_dump_json_cadence(_to_json_cadence(arg))) for arg in args]


def _load_json_cadence(data: bytes) -> dict[str, Any]:
    value = json.loads(data)
    if not isinstance(value, dict) or "type" not in value:
        raise ValueError("invalid JSON-Cadence value: missing 'type'")
    return value


def decode_cadence_value(value: str) -> dict[str, Any]:
    """Decode a base64 JSON-Cadence value into its JSON form."""
    return _load_json_cadence(_b64decode(value))


def to_proposal_key(key: models.ProposalKey) -> ProposalKey:
    """Convert an API proposal key."""
    return ProposalKey(
        address=hex_to_address(key.address),
        key_index=_to_int(key.key_index),
        sequence_number=_to_uint(key.sequence_number),
    )


def to_signatures(
    signatures: Iterable[models.TransactionSignature],
) -> list[TransactionSignature]:
    """Convert API transaction signatures."""
    result = []
    for sig in signatures:
        try:
            raw = _b64decode(sig.signature)
        except ValueError:
            raw = b""
        result.append(
            TransactionSignature(
                address=hex_to_address(sig.address),
                key_index=_to_int(sig.key_index),
                signature=raw,
            )
        )
    return result


def to_transaction(tx: models.Transaction) -> Transaction:
    """Convert an API transaction."""
    try:
        script = to_script(tx.script)
    except ValueError as exc:
        raise ValueError(f"failed to decode script of transaction with ID {tx.id}: {exc}") from exc
    try:
        args = to_args(tx.arguments)
    except ValueError as exc:
        raise ValueError(
            f"failed to decode arguments of transaction with ID {tx.id}: {exc}"
        ) from exc

    return Transaction(
        script=script,
        arguments=args,
        reference_block_id=hex_to_id(tx.reference_block_id),
        gas_limit=_to_uint(tx.gas_limit),
        proposal_key=to_proposal_key(tx.proposal_key or models.ProposalKey()),
        payer=hex_to_address(tx.payer),
        authorizers=[hex_to_address(a) for a in tx.authorizers],
        payload_signatures=to_signatures(tx.payload_signatures),
        envelope_signatures=to_signatures(tx.envelope_signatures),
    )


def to_transaction_status(status: models.TransactionStatus | str | None) -> TransactionStatus:
    """Map an API transaction status; anything unrecognised is ``UNKNOWN``."""
    if status is None:
        return TransactionStatus.UNKNOWN
    return _STATUSES.get(status, TransactionStatus.UNKNOWN)


def to_events(events: Iterable[models.Event]) -> list[Event]:
    """Convert API events, decoding their JSON-Cadence payloads."""
    flow_events = []
    for event in events:
        payload = _b64decode(event.payload)
        value = _load_json_cadence(payload)
        if value["type"] != "Event":
            raise ValueError(f"event payload is a {value['type']} value, not an Event")
        flow_events.append(
            Event(
                type=event.type,
                transaction_id=hex_to_id(event.transaction_id),
                transaction_index=_to_int(event.transaction_index),
                event_index=_to_int(event.event_index),
                value=value,
                payload=payload,
            )
        )
    return flow_events


def to_block_events(block_events: Iterable[models.BlockEvents]) -> list[BlockEvents]:
    """Convert API block events."""
    return [
        BlockEvents(
            block_id=hex_to_id(block.block_id),
            height=_to_uint(block.block_height),
            block_timestamp=block.block_timestamp,
            events=to_events(block.events),
        )
        for block in block_events
    ]


def to_transaction_result(result: models.TransactionResult) -> TransactionResult:
    """Convert an API transaction result."""
    events = to_events(result.events)
    return TransactionResult(
        status=to_transaction_status(result.status),
        error=result.error_message or None,
        events=events,
        block_id=hex_to_id(result.block_id),
    )


def encode_signatures(
    signatures: Iterable[TransactionSignature],
) -> list[models.TransactionSignature]:
    """Convert transaction signatures into API signatures."""
    return [
        models.TransactionSignature(
            address=str(sig.address),
            key_index=str(sig.key_index),
            signature=_b64encode(sig.signature),
        )
        for sig in signatures
    ]


def encode_transaction(tx: Transaction) -> bytes:
    """Encode a transaction as the JSON body of a send request."""
    body = models.TransactionsBody(
        script=encode_script(tx.script),
        arguments=encode_args(tx.arguments),
        reference_block_id=str(tx.reference_block_id),
        gas_limit=str(tx.gas_limit),
        payer=str(tx.payer),
        proposal_key=models.ProposalKey(
            address=str(tx.proposal_key.address),
            key_index=str(tx.proposal_key.key_index),
            sequence_number=str(tx.proposal_key.sequence_number),
        ),
        authorizers=[str(a) for a in tx.authorizers],
        payload_signatures=encode_signatures(tx.payload_signatures),
        envelope_signatures=encode_signatures(tx.envelope_signatures),
    )
    return json.dumps(models.to_dict(body), separators=(",", ":")).encode("utf-8")


def to_execution_result(result: models.ExecutionResult) -> ExecutionResult:
    """Convert an API execution result."""
    service_events = [
        ServiceEvent(type=event.type, payload=event.payload.encode("utf-8"))
        for event in result.events
    ]
    chunks = [
        Chunk(
            collection_index=_to_uint(chunk.collection_index),
            start_state=hex_to_state_commitment(chunk.start_state),
            event_collection=chunk.event_collection.encode("utf-8"),
            block_id=hex_to_id(chunk.block_id),
            total_computation_used=_to_uint(chunk.total_computation_used),
            number_of_transactions=_to_uint(chunk.number_of_transactions) & _MAX_UINT16,
            index=_to_uint(chunk.index),
            end_state=hex_to_state_commitment(chunk.end_state),
        )
        for chunk in result.chunks
    ]
    return ExecutionResult(
        previous_result_id=hex_to_id(result.previous_result_id),
        block_id=hex_to_id(result.block_id),
        chunks=chunks,
        service_events=service_events,
    )