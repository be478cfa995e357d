"""Data models exchanged with the Flow HTTP access API, with JSON mapping."""

import re
import types
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Union, get_args, get_origin


def _attr(json_name: str, *, omitempty: bool = False, **kwargs: Any) -> Any:
    """Declare a model attribute together with its JSON key."""
    return field(metadata={"json": json_name, "omitempty": omitempty}, **kwargs)


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class SigningAlgorithm(_StrEnum):
    """Signing algorithm names used by the access API."""

    BLSBLS12381 = "BLSBLS12381"
    ECDSAP256 = "ECDSAP256"
    ECDSA_SECP256K1 = "ECDSASecp256k1"


class HashingAlgorithm(_StrEnum):
    """Hashing algorithm names used by the access API."""

    SHA2_256 = "SHA2_256"
    SHA2_384 = "SHA2_384"
    SHA3_256 = "SHA3_256"
    SHA3_384 = "SHA3_384"
    KMAC128 = "KMAC128"


class TransactionStatus(_StrEnum):
    """State of a transaction; only sealed and expired are final."""

    PENDING = "Pending"
    FINALIZED = "Finalized"
    EXECUTED = "Executed"
    SEALED = "Sealed"
    EXPIRED = "Expired"


class TransactionExecution(_StrEnum):
    """Whether the execution of a transaction succeeded."""

    PENDING = "Pending"
    SUCCESS = "Success"
    FAILURE = "Failure"


@dataclass
class Links:
    self_link: str = _attr("_self", omitempty=True, default="")


@dataclass
class AccountExpandable:
    keys: str = _attr("keys", omitempty=True, default="")
    contracts: str = _attr("contracts", omitempty=True, default="")


@dataclass
class AccountPublicKey:
    index: str = _attr("index", default="")
    public_key: str = _attr("public_key", default="")
    signing_algorithm: SigningAlgorithm | None = _attr("signing_algorithm", default=None)
    hashing_algorithm: HashingAlgorithm | None = _attr("hashing_algorithm", default=None)
    sequence_number: str = _attr("sequence_number", default="")
    weight: str = _attr("weight", default="")
    revoked: bool = _attr("revoked", default=False)


@dataclass
class Account:
    address: str = _attr("address", default="")
    balance: str = _attr("balance", default="")
    keys: list[AccountPublicKey] = _attr("keys", omitempty=True, default_factory=list)
    contracts: dict[str, str] = _attr("contracts", omitempty=True, default_factory=dict)
    expandable: AccountExpandable | None = _attr("_expandable", default=None)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class AggregatedSignature:
    verifier_signatures: list[str] = _attr("verifier_signatures", default_factory=list)
    signer_ids: list[str] = _attr("signer_ids", default_factory=list)


@dataclass
class BlockHeader:
    id: str = _attr("id", default="")
    parent_id: str = _attr("parent_id", default="")
    height: str = _attr("height", default="")
    timestamp: datetime | None = _attr("timestamp", default=None)
    parent_voter_signature: str = _attr("parent_voter_signature", default="")


@dataclass
class CollectionGuarantee:
    collection_id: str = _attr("collection_id", default="")
    signer_ids: list[str] = _attr("signer_ids", default_factory=list)
    signature: str = _attr("signature", default="")


@dataclass
class BlockSeal:
    block_id: str = _attr("block_id", default="")
    result_id: str = _attr("result_id", default="")
    final_state: str = _attr("final_state", default="")
    aggregated_approval_signatures: list[AggregatedSignature] = _attr(
        "aggregated_approval_signatures", default_factory=list
    )


@dataclass
class BlockPayload:
    collection_guarantees: list[CollectionGuarantee] = _attr(
        "collection_guarantees", default_factory=list
    )
    block_seals: list[BlockSeal] = _attr("block_seals", default_factory=list)


@dataclass
class Chunk:
    block_id: str = _attr("block_id", default="")
    collection_index: str = _attr("collection_index", default="")
    start_state: str = _attr("start_state", default="")
    end_state: str = _attr("end_state", default="")
    event_collection: str = _attr("event_collection", default="")
    index: str = _attr("index", default="")
    number_of_transactions: str = _attr("number_of_transactions", default="")
    total_computation_used: str = _attr("total_computation_used", default="")


@dataclass
class Event:
    type: str = _attr("type", default="")
    transaction_id: str = _attr("transaction_id", default="")
    transaction_index: str = _attr("transaction_index", default="")
    event_index: str = _attr("event_index", default="")
    payload: str = _attr("payload", default="")


@dataclass
class ExecutionResult:
    id: str = _attr("id", default="")
    block_id: str = _attr("block_id", default="")
    events: list[Event] = _attr("events", default_factory=list)
    chunks: list[Chunk] = _attr("chunks", omitempty=True, default_factory=list)
    previous_result_id: str = _attr("previous_result_id", default="")
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class BlockExpandable:
    payload: str = _attr("payload", omitempty=True, default="")
    execution_result: str = _attr("execution_result", omitempty=True, default="")


@dataclass
class Block:
    header: BlockHeader | None = _attr("header", default=None)
    payload: BlockPayload | None = _attr("payload", omitempty=True, default=None)
    execution_result: ExecutionResult | None = _attr(
        "execution_result", omitempty=True, default=None
    )
    expandable: BlockExpandable | None = _attr("_expandable", default=None)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class BlockEvents:
    block_id: str = _attr("block_id", omitempty=True, default="")
    block_height: str = _attr("block_height", omitempty=True, default="")
    block_timestamp: datetime | None = _attr("block_timestamp", omitempty=True, default=None)
    events: list[Event] = _attr("events", omitempty=True, default_factory=list)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class ProposalKey:
    address: str = _attr("address", default="")
    key_index: str = _attr("key_index", default="")
    sequence_number: str = _attr("sequence_number", default="")


@dataclass
class TransactionSignature:
    address: str = _attr("address", default="")
    key_index: str = _attr("key_index", default="")
    signature: str = _attr("signature", default="")


@dataclass
class TransactionResult:
    block_id: str = _attr("block_id", default="")
    execution: TransactionExecution | None = _attr("execution", omitempty=True, default=None)
    status: TransactionStatus | None = _attr("status", default=None)
    status_code: int = _attr("status_code", default=0)
    error_message: str = _attr("error_message", default="")
    computation_used: str = _attr("computation_used", default="")
    events: list[Event] = _attr("events", default_factory=list)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class TransactionExpandable:
    result: str = _attr("result", omitempty=True, default="")


@dataclass
class Transaction:
    id: str = _attr("id", default="")
    script: str = _attr("script", default="")
    arguments: list[str] = _attr("arguments", default_factory=list)
    reference_block_id: str = _attr("reference_block_id", default="")
    gas_limit: str = _attr("gas_limit", default="")
    payer: str = _attr("payer", default="")
    proposal_key: ProposalKey | None = _attr("proposal_key", default=None)
    authorizers: list[str] = _attr("authorizers", default_factory=list)
    payload_signatures: list[TransactionSignature] = _attr(
        "payload_signatures", default_factory=list
    )
    envelope_signatures: list[TransactionSignature] = _attr(
        "envelope_signatures", default_factory=list
    )
    result: TransactionResult | None = _attr("result", omitempty=True, default=None)
    expandable: TransactionExpandable | None = _attr("_expandable", default=None)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class CollectionExpandable:
    transactions: list[str] = _attr("transactions", omitempty=True, default_factory=list)


@dataclass
class Collection:
    id: str = _attr("id", default="")
    transactions: list[Transaction] = _attr("transactions", omitempty=True, default_factory=list)
    expandable: CollectionExpandable | None = _attr("_expandable", default=None)
    links: Links | None = _attr("_links", omitempty=True, default=None)


@dataclass
class ModelError:
    code: int = _attr("code", omitempty=True, default=0)
    message: str = _attr("message", omitempty=True, default="")


@dataclass
class InlineResponse200:
    value: str = _attr("value", omitempty=True, default="")


@dataclass
class ScriptsBody:
    script: str = _attr("script", omitempty=True, default="")
    arguments: list[str] = _attr("arguments", omitempty=True, default_factory=list)


@dataclass
class TransactionsBody:
    script: str = _attr("script", default="")
    arguments: list[str] = _attr("arguments", default_factory=list)
    reference_block_id: str = _attr("reference_block_id", default="")
    gas_limit: str = _attr("gas_limit", default="")
    payer: str = _attr("payer", default="")
    proposal_key: ProposalKey | None = _attr("proposal_key", default=None)
    authorizers: list[str] = _attr("authorizers", default_factory=list)
    payload_signatures: list[TransactionSignature] = _attr(
        "payload_signatures", default_factory=list
    )
    envelope_signatures: list[TransactionSignature] = _attr(
        "envelope_signatures", default_factory=list
    )


_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def _parse_timestamp(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction, zone = match.group(7), match.group(8)
    micro = int((fraction or "")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def _format_timestamp(value: datetime) -> str:
    base = value.strftime("%Y-%m-%dT%H:%M:%S")
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        base += "." + fraction
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return base + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{base}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)) and not isinstance(value, Enum):
        return value == 0
    return False


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if f.metadata.get("omitempty") and _is_empty(item):
                continue
            out[f.metadata.get("json", f.name)] = _encode(item)
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    return value


def to_dict(model: Any) -> Any:
    """Convert a model (or list of models) to JSON-ready data with the API's keys."""
    return _encode(model)


def _type_name(hint: Any) -> str:
    return getattr(hint, "__name__", None) or str(hint)


def _mismatch(hint: Any, value: Any) -> TypeError:
    return TypeError(f"cannot decode {type(value).__name__} into {_type_name(hint)}")


def _decode(hint: Any, value: Any) -> Any:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = get_args(hint)
        if value is None and type(None) in args:
            return None
        candidates = [arg for arg in args if arg is not type(None)]
        errors: list[Exception] = []
        for candidate in candidates:
            try:
                return _decode(candidate, value)
            except (TypeError, ValueError) as exc:
                errors.append(exc)
        raise errors[0] if errors else _mismatch(hint, value)
    if origin is list:
        if value is None:
            return []
        if not isinstance(value, list):
            raise _mismatch(hint, value)
        (item_type,) = get_args(hint)
        return [_decode(item_type, item) for item in value]
    if origin is dict:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise _mismatch(hint, value)
        key_type, item_type = get_args(hint)
        return {_decode(key_type, k): _decode(item_type, v) for k, v in value.items()}
    if hint is Any:
        return value
    if isinstance(hint, type) and is_dataclass(hint):
        if value is None:
            return hint()
        if not isinstance(value, dict):
            raise _mismatch(hint, value)
        kwargs = {}
        for f in fields(hint):
            key = f.metadata.get("json", f.name)
            if key in value:
                kwargs[f.name] = _decode(f.type, value[key])
        return hint(**kwargs)
    if isinstance(hint, type) and issubclass(hint, Enum):
        if not isinstance(value, str):
            raise _mismatch(hint, value)
        try:
            return hint(value)
        except ValueError:
            return value
    if hint is datetime:
        if not isinstance(value, str):
            raise _mismatch(hint, value)
        return _parse_timestamp(value)
    if hint is bool:
        if value is None:
            return False
        if not isinstance(value, bool):
            raise _mismatch(hint, value)
        return value
    if hint is int:
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, int):
            raise _mismatch(hint, value)
        return value
    if hint is str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise _mismatch(hint, value)
        return value
    raise TypeError(f"unsupported model type {_type_name(hint)}")


def from_dict(model_type: Any, data: Any) -> Any:
    """Build a model (or a ``list[...]`` of models) from decoded JSON data.

    Raises ``TypeError`` when the data does not have the expected shape.
    """
    return _decode(model_type, data)