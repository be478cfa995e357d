"""Clients for the Flow HTTP access API."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from flowsdk.access import convert, models
from flowsdk.access.handler import AccessAPIError, HTTPError, HTTPHandler, QueryOpts
from flowsdk.account import Account
from flowsdk.address import Address
from flowsdk.block import Block, BlockHeader, Identifier
from flowsdk.collection import Collection
from flowsdk.entities import BlockEvents, ExecutionResult, Transaction, TransactionResult

EMULATOR_HOST = "http://127.0.0.1:8888/v1"
TESTNET_HOST = "https://rest-testnet.onflow.org/v1/"
MAINNET_HOST = "https://rest-mainnet.onflow.org/v1/"
CANARYNET_HOST = "https://rest-canary.onflow.org/v1/"

_MAX_UINT64 = (1 << 64) - 1

FINAL = _MAX_UINT64 - 1
"""Special height pointing to the latest finalised block."""

SEALED = _MAX_UINT64 - 2
"""Special height pointing to the latest sealed block."""

_SPECIAL_HEIGHTS = {FINAL: "final", SEALED: "sealed"}

_PING_ERRORS = (HTTPError, AccessAPIError, ValueError, TypeError, OSError)


@dataclass
class HeightQuery:
    """Heights to query: either a list of heights or a start and end range."""

    heights: list[int] = field(default_factory=list)
    start: int = 0
    end: int = 0

    def heights_string(self) -> str:
        """The heights joined by commas, with special heights given by name."""
        return ",".join(_SPECIAL_HEIGHTS.get(h, str(h)) for h in self.heights)

    def start_string(self) -> str:
        """The start height, or an empty string when no range is defined."""
        if self.start == 0 and self.end == 0:
            return ""
        return str(self.start)

    def end_string(self) -> str:
        """The end height, or an empty string when it is zero."""
        return "" if self.end == 0 else str(self.end)

    def range_defined(self) -> bool:
        return self.end != 0 or self.start != 0

    def validate_range(self) -> None:
        """Raise ``ValueError`` if a defined range starts after it ends."""
        if self.range_defined() and self.start > self.end:
            raise ValueError(
                f"start height ({self.start}) must be smaller than end height ({self.end})"
            )

    def heights_defined(self) -> bool:
        return len(self.heights) > 0

    def single_height_defined(self) -> bool:
        return len(self.heights) == 1


class BaseClient:
    """Access to the HTTP API with its query options and height queries."""

    def __init__(self, handler: HTTPHandler) -> None:
        self.handler = handler

    def ping(self) -> None:
        """Check that the access node answers; raises ``AccessAPIError`` if not."""
        try:
            self.handler.get_blocks_by_heights(_SPECIAL_HEIGHTS[SEALED], "", "")
        except _PING_ERRORS as exc:
            raise AccessAPIError("ping error", exc) from exc

    def get_block_by_id(self, block_id: Identifier, *args: QueryOpts) -> Block:
        return convert.to_block(self.handler.get_block_by_id(str(block_id), *args))

    def get_blocks_by_heights(self, height_query: HeightQuery, *args: QueryOpts) -> list[Block]:
        """Fetch the blocks selected by ``height_query``."""
        if not height_query.heights_defined() and not height_query.range_defined():
            raise ValueError("must either provide heights or start and end height range")
        height_query.validate_range()
        blocks = self.handler.get_blocks_by_heights(
            height_query.heights_string(),
            height_query.start_string(),
            height_query.end_string(),
            *args,
        )
        return convert.to_blocks(blocks)

    def get_collection(self, collection_id: Identifier, *args: QueryOpts) -> Collection:
        return convert.to_collection(self.handler.get_collection(str(collection_id), *args))

    def send_transaction(self, tx: Transaction, *args: QueryOpts) -> None:
        self.handler.send_transaction(convert.encode_transaction(tx), *args)

    def get_transaction(self, transaction_id: Identifier, *args: QueryOpts) -> Transaction:
        tx = self.handler.get_transaction(str(transaction_id), False, *args)
        return convert.to_transaction(tx)

    def get_transaction_result(
        self, transaction_id: Identifier, *args: QueryOpts
    ) -> TransactionResult:
        tx = self.handler.get_transaction(str(transaction_id), True, *args)
        return convert.to_transaction_result(tx.result or models.TransactionResult())

    def get_account_at_block_height(
        self, address: Address, block_query: HeightQuery, *args: QueryOpts
    ) -> Account:
        if not block_query.single_height_defined():
            raise ValueError("can only provide one block height at a time")
        account = self.handler.get_account(str(address), block_query.heights_string(), *args)
        return convert.to_account(account)

    def execute_script_at_block_id(
        self,
        block_id: Identifier,
        script: bytes,
        arguments: Sequence[Any] | None,
        *args: QueryOpts,
    ) -> dict[str, Any]:
        """Execute a script at a block; returns the JSON-Cadence result value."""
        encoded_args = convert.encode_cadence_args(arguments or [])
        result = self.handler.execute_script_at_block_id(
            str(block_id), convert.encode_script(script), encoded_args, *args
        )
        return convert.decode_cadence_value(result)

    def execute_script_at_block_height(
        self,
        block_query: HeightQuery,
        script: bytes,
        arguments: Sequence[Any] | None,
        *args: QueryOpts,
    ) -> dict[str, Any]:
        """Execute a script at a single height; returns the JSON-Cadence result value."""
        encoded_args = convert.encode_cadence_args(arguments or [])
        if not block_query.single_height_defined():
            raise ValueError("must only provide one height at a time")
        result = self.handler.execute_script_at_block_height(
            block_query.heights_string(), convert.encode_script(script), encoded_args, *args
        )
        return convert.decode_cadence_value(result)

    def get_events_for_height_range(
        self, event_type: str, height_query: HeightQuery
    ) -> list[BlockEvents]:
        if not height_query.range_defined():
            raise ValueError("must provide start and end height range")
        height_query.validate_range()
        events = self.handler.get_events(
            event_type, height_query.start_string(), height_query.end_string(), None
        )
        return convert.to_block_events(events)

    def get_events_for_block_ids(
        self, event_type: str, block_ids: Sequence[Identifier]
    ) -> list[BlockEvents]:
        ids = [str(block_id) for block_id in block_ids]
        return convert.to_block_events(self.handler.get_events(event_type, "", "", ids))

    def get_latest_protocol_state_snapshot(self) -> bytes:
        """Always raises: the HTTP API offers no protocol state snapshots."""
        raise AccessAPIError(
            "get latest protocol snapshot is currently not supported for HTTP API"
        )

    def get_execution_result_for_block_id(self, block_id: Identifier) -> ExecutionResult:
        results = self.handler.get_execution_results([str(block_id)])
        if not results:
            raise AccessAPIError("results not found")
        return convert.to_execution_result(results[0])


def new_base_client(host: str) -> BaseClient:
    """Create a :class:`BaseClient` talking to ``host``."""
    return BaseClient(HTTPHandler(host, debug=False))


class Client:
    """Network agnostic access API over HTTP."""

    def __init__(self, base_client: BaseClient) -> None:
        self.base_client = base_client

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def ping(self) -> None:
        self.base_client.ping()

    def get_block_by_id(self, block_id: Identifier) -> Block:
        return self.base_client.get_block_by_id(block_id)

    def get_latest_block_header(self, is_sealed: bool) -> BlockHeader:
        return self.get_latest_block(is_sealed).header

    def get_block_header_by_id(self, block_id: Identifier) -> BlockHeader:
        return self.get_block_by_id(block_id).header

    def get_block_header_by_height(self, height: int) -> BlockHeader:
        return self.get_block_by_height(height).header

    def _single_block(self, height: int) -> Block:
        blocks = self.base_client.get_blocks_by_heights(HeightQuery(heights=[height]))
        if not blocks:
            raise AccessAPIError("get block failed")
        return blocks[0]

    def get_latest_block(self, is_sealed: bool) -> Block:
        return self._single_block(SEALED if is_sealed else FINAL)

    def get_block_by_height(self, height: int) -> Block:
        return self._single_block(height)

    def get_collection(self, collection_id: Identifier) -> Collection:
        return self.base_client.get_collection(collection_id)

    def send_transaction(self, tx: Transaction) -> None:
        self.base_client.send_transaction(tx)

    def get_transaction(self, transaction_id: Identifier) -> Transaction:
        return self.base_client.get_transaction(transaction_id)

    def get_transaction_result(self, transaction_id: Identifier) -> TransactionResult:
        return self.base_client.get_transaction_result(transaction_id)

    def get_account(self, address: Address) -> Account:
        """Alias for :meth:`get_account_at_latest_block`."""
        return self.get_account_at_latest_block(address)

    def get_account_at_latest_block(self, address: Address) -> Account:
        return self.base_client.get_account_at_block_height(
            address, HeightQuery(heights=[SEALED])
        )

    def get_account_at_block_height(self, address: Address, block_height: int) -> Account:
        return self.base_client.get_account_at_block_height(
            address, HeightQuery(heights=[block_height])
        )

    def execute_script_at_latest_block(
        self, script: bytes, arguments: Sequence[Any] | None
    ) -> dict[str, Any]:
        return self.base_client.execute_script_at_block_height(
            HeightQuery(heights=[SEALED]), script, arguments
        )

    def execute_script_at_block_id(
        self, block_id: Identifier, script: bytes, arguments: Sequence[Any] | None
    ) -> dict[str, Any]:
        return self.base_client.execute_script_at_block_id(block_id, script, arguments)

    def execute_script_at_block_height(
        self, height: int, script: bytes, arguments: Sequence[Any] | None
    ) -> dict[str, Any]:
        return self.base_client.execute_script_at_block_height(
            HeightQuery(heights=[height]), script, arguments
        )

    def get_events_for_height_range(
        self, event_type: str, start_height: int, end_height: int
    ) -> list[BlockEvents]:
        return self.base_client.get_events_for_height_range(
            event_type, HeightQuery(start=start_height, end=end_height)
        )

    def get_events_for_block_ids(
        self, event_type: str, block_ids: Sequence[Identifier]
    ) -> list[BlockEvents]:
        return self.base_client.get_events_for_block_ids(event_type, block_ids)

    def get_latest_protocol_state_snapshot(self) -> bytes:
        return self.base_client.get_latest_protocol_state_snapshot()

    def get_execution_result_for_block_id(self, block_id: Identifier) -> ExecutionResult:
        return self.base_client.get_execution_result_for_block_id(block_id)

    def close(self) -> None:
        """Nothing to release: every request opens and closes its own connection."""
        return None


def new_client(host: str) -> Client:
    """Create a :class:`Client` talking to ``host``."""
    return Client(new_base_client(host))