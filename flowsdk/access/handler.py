"""Low-level HTTP handler for the Flow access API."""

from __future__ import annotations

import json
import time
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from flowsdk.access import models

_BAD_REQUEST = 400


class QueryOpts(Protocol):
    """An option that contributes one query parameter to a request URL."""

    def to_query(self) -> tuple[str, str]: ...


class HTTPError(Exception):
    """An error response returned by the access API."""

    def __init__(self, url: str = "", code: int = 0, message: str = "") -> None:
        super().__init__(message)
        self.url = url
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


class AccessAPIError(Exception):
    """A request to the access API failed; ``cause`` holds the underlying error."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


@dataclass
class ExpandOpts:
    """Fields to retrieve as extra data in the response."""

    expands: list[str] = field(default_factory=list)

    def to_query(self) -> tuple[str, str]:
        return "expands", ",".join(self.expands)


@dataclass
class SelectOpts:
    """Fields to fetch exclusively, filtering out everything else."""

    selects: list[str] = field(default_factory=list)

    def to_query(self) -> tuple[str, str]:
        return "select", ",".join(self.selects)


_WRAPPED = (HTTPError, AccessAPIError, requests.RequestException, ValueError, TypeError)


@contextmanager
def _failure(message: str) -> Iterator[None]:
    """Wrap request and decoding errors with a description of the operation."""
    try:
        yield
    except _WRAPPED as exc:
        raise AccessAPIError(message, exc) from exc


def _decode(model_type: Any, data: Any) -> Any:
    try:
        return models.from_dict(model_type, data)
    except (TypeError, ValueError) as exc:
        raise AccessAPIError("JSON decoding failed", exc) from exc


def _load_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise AccessAPIError("JSON decoding failed", exc) from exc


def _dump_json(value: Any) -> bytes:
    return json.dumps(models.to_dict(value), separators=(",", ":")).encode("utf-8")


class HTTPHandler:
    """Issues requests to the access API and decodes the responses into models."""

    def __init__(
        self,
        host: str,
        debug: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        urlsplit(host)  # raises ValueError for a malformed host
        self.base = host
        self.debug = debug
        self.session = session if session is not None else requests.Session()

    def _url(
        self,
        path: str,
        opts: Iterable[QueryOpts],
        params: Iterable[tuple[str, str]] = (),
    ) -> str:
        parts = urlsplit(f"{self.base}{path}")
        query = parse_qsl(parts.query, keep_blank_values=True)
        query.extend(opt.to_query() for opt in opts)
        query.extend(params)
        query.sort(key=lambda pair: pair[0])
        return urlunsplit(parts._replace(query=urlencode(query)))

    def build_url(self, path: str, *args: QueryOpts) -> str:
        """Join ``path`` to the base URL and add the query parameters of the options."""
        return self._url(path, args)

    def _log(self, text: str) -> None:
        if self.debug:
            print(text, end="")

    def _http_error(self, url: str, body: bytes) -> Exception:
        try:
            data = json.loads(body)
        except ValueError as exc:
            return AccessAPIError(f"invalid error response from {url}", exc)
        if not isinstance(data, dict):
            return AccessAPIError(f"invalid error response from {url}")
        code = data.get("code", 0)
        message = data.get("message", "")
        return HTTPError(
            url=url,
            code=code if isinstance(code, int) and not isinstance(code, bool) else 0,
            message=message if isinstance(message, str) else "",
        )

    def get(self, url: str) -> Any:
        """GET ``url`` and return the decoded JSON body; error responses raise."""
        self._log(f"\n-> GET {url} t={int(time.time())}")
        response = self.session.get(url)
        body = response.content
        if response.status_code >= _BAD_REQUEST:
            self._log(
                f"\n<- FAILED GET {url} t={int(time.time())} "
                f"status={response.status_code} - {body.decode('utf-8', 'replace')}"
            )
            raise self._http_error(url, body)
        self._log(f"\n<- GET {url} t={int(time.time())} - {body.decode('utf-8', 'replace')}")
        return _load_json(body)

    def post(self, url: str, body: bytes) -> Any:
        """POST a JSON ``body`` to ``url`` and return the decoded JSON response."""
        text = body.decode("utf-8", "replace")
        self._log(f"\n-> POST {url} t={int(time.time())} - {text}")
        try:
            response = self.session.post(
                url, data=body, headers={"Content-Type": "application/json"}
            )
        except requests.RequestException as exc:
            raise AccessAPIError(f"HTTP POST {url} failed", exc) from exc
        response_body = response.content
        if response.status_code >= _BAD_REQUEST:
            self._log(
                f"\n<- POST FAILED {url}, status={response.status_code}, "
                f"response: {response_body.decode('utf-8', 'replace')}"
            )
            raise self._http_error(url, response_body)
        self._log(f"\n<- POST {url} t={int(time.time())} - {text}")
        return _load_json(response_body)

    def get_block_by_id(self, block_id: str, *args: QueryOpts) -> models.Block:
        """Fetch the block with ``block_id`` including its payload."""
        url = self._url(f"/blocks/{block_id}", args, [("expand", "payload")])
        with _failure(f"get block ID {block_id} failed"):
            blocks = _decode(list[models.Block], self.get(url))
        if not blocks:
            raise AccessAPIError("get block failed")
        return blocks[0]

    def get_blocks_by_heights(
        self,
        heights: str,
        start_height: str,
        end_height: str,
        *args: QueryOpts,
    ) -> list[models.Block]:
        """Fetch blocks by a comma separated list of heights or by a height range."""
        if heights:
            params = [("height", heights)]
        elif start_height and end_height:
            params = [("start_height", start_height), ("end_height", end_height)]
        else:
            raise ValueError("must provide either heights or start and end height")
        params.append(("expand", "payload"))
        url = self._url("/blocks", args, params)
        with _failure(f"get block by height {heights} failed"):
            return _decode(list[models.Block], self.get(url))

    def get_account(self, address: str, height: str, *args: QueryOpts) -> models.Account:
        """Fetch an account with its keys and contracts at ``height``."""
        url = self._url(
            f"/accounts/{address}",
            args,
            [("height", height), ("expand", "keys,contracts")],
        )
        with _failure(f"get account {address} failed"):
            return _decode(models.Account, self.get(url))

    def get_collection(self, collection_id: str, *args: QueryOpts) -> models.Collection:
        """Fetch the collection with ``collection_id``."""
        url = self._url(f"/collections/{collection_id}", args)
        with _failure(f"get collection ID {collection_id} failed"):
            return _decode(models.Collection, self.get(url))

    def _execute_script(
        self,
        params: list[tuple[str, str]],
        script: str,
        arguments: Sequence[str] | None,
        opts: Iterable[QueryOpts],
    ) -> str:
        url = self._url("/scripts", opts, params)
        body = _dump_json(models.ScriptsBody(script=script, arguments=list(arguments or [])))
        with _failure(f"executing script {script} failed"):
            return _decode(str, self.post(url, body))

    def execute_script_at_block_height(
        self,
        height: str,
        script: str,
        arguments: Sequence[str] | None,
        *args: QueryOpts,
    ) -> str:
        """Execute a base64 script at a block height; returns the base64 result."""
        return self._execute_script([("block_height", height)], script, arguments, args)

    def execute_script_at_block_id(
        self,
        block_id: str,
        script: str,
        arguments: Sequence[str] | None,
        *args: QueryOpts,
    ) -> str:
        """Execute a base64 script at a block ID; returns the base64 result."""
        return self._execute_script([("block_id", block_id)], script, arguments, args)

    def get_transaction(
        self,
        transaction_id: str,
        include_result: bool,
        *args: QueryOpts,
    ) -> models.Transaction:
        """Fetch a transaction, optionally expanding its result."""
        params = [("expand", "result")] if include_result else []
        url = self._url(f"/transactions/{transaction_id}", args, params)
        with _failure(f"get transaction ID {transaction_id} failed"):
            return _decode(models.Transaction, self.get(url))

    def send_transaction(self, transaction: bytes, *args: QueryOpts) -> None:
        """Submit an encoded transaction body."""
        _decode(models.Transaction, self.post(self._url("/transactions", args), transaction))

    def get_events(
        self,
        event_type: str,
        start: str,
        end: str,
        block_ids: Sequence[str] | None,
        *args: QueryOpts,
    ) -> list[models.BlockEvents]:
        """Fetch events of ``event_type`` for a height range or a list of block IDs."""
        if start and end:
            params = [("start_height", start), ("end_height", end)]
        elif block_ids:
            params = [("block_ids", ",".join(block_ids))]
        else:
            raise ValueError("must either provide start and end height or block IDs")
        params.append(("type", event_type))
        url = self._url("/events", args, params)
        with _failure(f"get events by type {event_type} failed"):
            return _decode(list[models.BlockEvents], self.get(url))

    def get_execution_results(
        self,
        block_ids: Sequence[str],
        *args: QueryOpts,
    ) -> list[models.ExecutionResult]:
        """Fetch the execution results of the given blocks."""
        url = self._url("/execution_results", args, [("block_ids", ",".join(block_ids))])
        with _failure(f"get execution results by IDs [{' '.join(block_ids)}] failed"):
            return _decode(list[models.ExecutionResult], self.get(url))

    def get_execution_result_by_id(
        self,
        result_id: str,
        *args: QueryOpts,
    ) -> models.ExecutionResult:
        """Fetch the execution result with ``result_id``."""
        url = self._url(f"/execution_results/{result_id}", args)
        with _failure(f"get execution result by ID {result_id} failed"):
            return _decode(models.ExecutionResult, self.get(url))