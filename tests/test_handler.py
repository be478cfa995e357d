import json
from datetime import datetime, timezone
from urllib.parse import urlsplit

import pytest
import responses

from flowsdk.access import models
from flowsdk.access.handler import (
    AccessAPIError,
    ExpandOpts,
    HTTPError,
    HTTPHandler,
    SelectOpts,
)

BASE = "http://flow.test/v1"

BLOCK_ID = "a1" * 32
PARENT_ID = "b2" * 32
COLLECTION_ID = "c3" * 32
TX_ID = "d4" * 32
RESULT_ID = "e5" * 32
ADDRESS = "0000000000000abc"
STAMP = datetime(2022, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def handler():
    return HTTPHandler(BASE)


def block_fixture(height="7"):
    return models.Block(
        header=models.BlockHeader(
            id=BLOCK_ID,
            parent_id=PARENT_ID,
            height=height,
            timestamp=STAMP,
            parent_voter_signature="dGVzdA==",
        ),
        payload=models.BlockPayload(
            collection_guarantees=[models.CollectionGuarantee(collection_id=COLLECTION_ID)],
            block_seals=[
                models.BlockSeal(
                    block_id=BLOCK_ID,
                    result_id=RESULT_ID,
                    aggregated_approval_signatures=[
                        models.AggregatedSignature(
                            verifier_signatures=["dGVzdA=="], signer_ids=["1"]
                        )
                    ],
                )
            ],
        ),
    )


def account_fixture():
    return models.Account(
        address=ADDRESS,
        balance="10",
        keys=[
            models.AccountPublicKey(
                index="0",
                public_key="ab" * 64,
                signing_algorithm=models.SigningAlgorithm.ECDSAP256,
                hashing_algorithm=models.HashingAlgorithm.SHA3_256,
                sequence_number="0",
                weight="1000",
            )
        ],
        contracts={"HelloWorld": "Y29udHJhY3QgSGVsbG9Xb3JsZCB7fQ=="},
    )


def collection_fixture():
    return models.Collection(id=COLLECTION_ID, transactions=[models.Transaction(id=TX_ID)])


def transaction_fixture():
    return models.Transaction(
        id=TX_ID,
        script="bWFpbigpIHt9",
        arguments=["e30="],
        reference_block_id=BLOCK_ID,
        gas_limit="42",
        payer=ADDRESS,
        proposal_key=models.ProposalKey(address=ADDRESS, key_index="1", sequence_number="2"),
        authorizers=[ADDRESS],
        payload_signatures=[
            models.TransactionSignature(address=ADDRESS, key_index="1", signature="c2ln")
        ],
        envelope_signatures=[
            models.TransactionSignature(address=ADDRESS, key_index="0", signature="c2ln")
        ],
    )


def block_events_fixture():
    return models.BlockEvents(
        block_id=BLOCK_ID,
        block_height="7",
        block_timestamp=STAMP,
        events=[
            models.Event(
                type="A.Foo",
                transaction_id=TX_ID,
                transaction_index="0",
                event_index="1",
                payload="e30=",
            )
        ],
    )


def execution_result_fixture():
    return models.ExecutionResult(
        id=RESULT_ID,
        block_id=BLOCK_ID,
        events=[models.Event(type="A.Foo", transaction_id=TX_ID, payload="e30=")],
        chunks=[
            models.Chunk(
                block_id=BLOCK_ID,
                collection_index="0",
                index="0",
                number_of_transactions="2",
                total_computation_used="100",
            )
        ],
        previous_result_id=PARENT_ID,
    )


def test_invalid_response(mocked, handler):
    mocked.add(responses.GET, f"{BASE}/blocks", json="123")
    with pytest.raises(AccessAPIError) as info:
        handler.get_blocks_by_heights("1", "", "")
    assert str(info.value).startswith("get block by height 1 failed: JSON decoding failed:")


def test_get_block_by_id_success(mocked, handler):
    block = block_fixture()
    mocked.add(responses.GET, f"{BASE}/blocks/0x1", json=[models.to_dict(block)])
    result = handler.get_block_by_id("0x1")
    assert result == block
    assert mocked.calls[0].request.url == f"{BASE}/blocks/0x1?expand=payload"


def test_get_block_by_id_empty(mocked, handler):
    mocked.add(responses.GET, f"{BASE}/blocks/0x1", json=[])
    with pytest.raises(AccessAPIError) as info:
        handler.get_block_by_id("0x1")
    assert str(info.value) == "get block failed"


def test_get_blocks_by_range(mocked, handler):
    block = block_fixture()
    mocked.add(responses.GET, f"{BASE}/blocks", json=[models.to_dict(block)])
    result = handler.get_blocks_by_heights("", "1", "2")
    assert result == [block]
    assert (
        mocked.calls[0].request.url
        == f"{BASE}/blocks?end_height=2&expand=payload&start_height=1"
    )


def test_get_blocks_by_list(mocked, handler):
    blocks = [block_fixture("1"), block_fixture("2")]
    mocked.add(responses.GET, f"{BASE}/blocks", json=[models.to_dict(b) for b in blocks])
    result = handler.get_blocks_by_heights("1,2", "", "")
    assert result == blocks
    assert mocked.calls[0].request.url == f"{BASE}/blocks?expand=payload&height=1%2C2"


@pytest.mark.parametrize(
    "heights,start,end",
    [("", "1", ""), ("", "", "1"), ("", "", "")],
)
def test_get_blocks_range_failure(handler, heights, start, end):
    with pytest.raises(ValueError) as info:
        handler.get_blocks_by_heights(heights, start, end)
    assert str(info.value) == "must provide either heights or start and end height"


def test_get_blocks_bad_request(mocked, handler):
    mocked.add(
        responses.GET,
        f"{BASE}/blocks",
        json={"code": 400, "message": "invalid height values"},
        status=400,
    )
    with pytest.raises(AccessAPIError) as info:
        handler.get_blocks_by_heights("foo,bar", "", "")
    assert str(info.value) == "get block by height foo,bar failed: invalid height values"
    cause = info.value.cause
    assert isinstance(cause, HTTPError)
    assert cause.code == 400
    assert cause.url == f"{BASE}/blocks?expand=payload&height=foo%2Cbar"


def test_get_account_success(mocked, handler):
    account = account_fixture()
    mocked.add(responses.GET, f"{BASE}/accounts/{ADDRESS}", json=models.to_dict(account))
    result = handler.get_account(ADDRESS, "sealed")
    assert result == account
    assert (
        mocked.calls[0].request.url
        == f"{BASE}/accounts/{ADDRESS}?expand=keys%2Ccontracts&height=sealed"
    )


def test_get_account_failure(mocked, handler):
    mocked.add(
        responses.GET,
        f"{BASE}/accounts/0x1",
        json={"code": 400, "message": "invalid height value"},
        status=400,
    )
    with pytest.raises(AccessAPIError) as info:
        handler.get_account("0x1", "foo")
    assert str(info.value) == "get account 0x1 failed: invalid height value"


def test_get_collection_success(mocked, handler):
    collection = collection_fixture()
    mocked.add(responses.GET, f"{BASE}/collections/0x1", json=models.to_dict(collection))
    result = handler.get_collection("0x1")
    assert result == collection
    assert mocked.calls[0].request.url == f"{BASE}/collections/0x1"


def test_get_collection_connection_failure(mocked, handler):
    with pytest.raises(AccessAPIError) as info:
        handler.get_collection("0x9")
    assert str(info.value).startswith("get collection ID 0x9 failed")


def test_execute_script_at_height(mocked, handler):
    script = "main() { return 42; }"
    mocked.add(responses.POST, f"{BASE}/scripts", json="42")
    result = handler.execute_script_at_block_height("1", script, None)
    assert result == "42"
    request = mocked.calls[0].request
    assert request.url == f"{BASE}/scripts?block_height=1"
    assert json.loads(request.body) == {"script": script}
    assert request.headers["Content-Type"] == "application/json"


def test_execute_script_at_block_id(mocked, handler):
    mocked.add(responses.POST, f"{BASE}/scripts", json="42")
    result = handler.execute_script_at_block_id("0x1", "main() { return 42; }", ["YQ=="])
    assert result == "42"
    request = mocked.calls[0].request
    assert request.url == f"{BASE}/scripts?block_id=0x1"
    assert json.loads(request.body)["arguments"] == ["YQ=="]


def test_execute_script_failure(mocked, handler):
    mocked.add(
        responses.POST,
        f"{BASE}/scripts",
        json={"code": 400, "message": "execution failure"},
        status=400,
    )
    with pytest.raises(AccessAPIError) as info:
        handler.execute_script_at_block_height("1", "main() { return 42; }", None)
    assert str(info.value) == "executing script main() { return 42; } failed: execution failure"


def test_send_transaction_success(mocked, handler):
    tx = transaction_fixture()
    raw = json.dumps(models.to_dict(tx)).encode("utf-8")
    mocked.add(responses.POST, f"{BASE}/transactions", json=models.to_dict(tx))
    assert handler.send_transaction(raw) is None
    assert mocked.calls[0].request.body == raw


def test_send_transaction_invalid_argument(mocked, handler):
    mocked.add(
        responses.POST,
        f"{BASE}/transactions",
        json={"code": 400, "message": "rpc error: code = InvalidArgument"},
        status=400,
    )
    with pytest.raises(HTTPError) as info:
        handler.send_transaction(b"{}")
    assert str(info.value) == "rpc error: code = InvalidArgument"
    assert info.value.code == 400


def test_send_transaction_connection_failure(mocked, handler):
    with pytest.raises(AccessAPIError) as info:
        handler.send_transaction(b"{}")
    assert str(info.value).startswith(f"HTTP POST {BASE}/transactions failed")


@pytest.mark.parametrize(
    "include_result,expected_url",
    [(False, f"{BASE}/transactions/0x1"), (True, f"{BASE}/transactions/0x1?expand=result")],
)
def test_get_transaction(mocked, handler, include_result, expected_url):
    tx = transaction_fixture()
    mocked.add(responses.GET, f"{BASE}/transactions/0x1", json=models.to_dict(tx))
    result = handler.get_transaction("0x1", include_result)
    assert result == tx
    assert mocked.calls[0].request.url == expected_url


def test_get_events_for_range(mocked, handler):
    events = [block_events_fixture()]
    mocked.add(responses.GET, f"{BASE}/events", json=[models.to_dict(e) for e in events])
    result = handler.get_events("A.Foo", "1", "3", [])
    assert result == events
    assert (
        mocked.calls[0].request.url
        == f"{BASE}/events?end_height=3&start_height=1&type=A.Foo"
    )


def test_get_events_for_ids(mocked, handler):
    events = [block_events_fixture()]
    mocked.add(responses.GET, f"{BASE}/events", json=[models.to_dict(e) for e in events])
    result = handler.get_events("A.Foo", "", "", ["0x1", "0x2"])
    assert result == events
    assert mocked.calls[0].request.url == f"{BASE}/events?block_ids=0x1%2C0x2&type=A.Foo"


def test_get_events_argument_failure(handler):
    with pytest.raises(ValueError) as info:
        handler.get_events("A", "", "", None)
    assert str(info.value) == "must either provide start and end height or block IDs"


def test_get_events_response_failure(mocked, handler):
    mocked.add(
        responses.GET,
        f"{BASE}/events",
        json={"code": 400, "message": "events not found"},
        status=400,
    )
    with pytest.raises(AccessAPIError) as info:
        handler.get_events("A.Foo", "1", "3", None)
    assert str(info.value) == "get events by type A.Foo failed: events not found"


def test_get_execution_results(mocked, handler):
    fixture = [execution_result_fixture()]
    mocked.add(
        responses.GET, f"{BASE}/execution_results", json=[models.to_dict(r) for r in fixture]
    )
    results = handler.get_execution_results(["0x1"])
    assert results == fixture
    assert mocked.calls[0].request.url == f"{BASE}/execution_results?block_ids=0x1"


def test_get_execution_results_failure(mocked, handler):
    mocked.add(
        responses.GET,
        f"{BASE}/execution_results",
        json={"code": 404, "message": "not found"},
        status=404,
    )
    with pytest.raises(AccessAPIError) as info:
        handler.get_execution_results(["0x1", "0x2"])
    assert str(info.value) == "get execution results by IDs [0x1 0x2] failed: not found"


def test_get_execution_result_by_id(mocked, handler):
    fixture = execution_result_fixture()
    mocked.add(responses.GET, f"{BASE}/execution_results/0x1", json=models.to_dict(fixture))
    result = handler.get_execution_result_by_id("0x1")
    assert result == fixture
    assert mocked.calls[0].request.url == f"{BASE}/execution_results/0x1"


def test_error_response_not_json(mocked, handler):
    mocked.add(responses.GET, f"{BASE}/collections/0x1", body="oops", status=500)
    with pytest.raises(AccessAPIError) as info:
        handler.get_collection("0x1")
    assert isinstance(info.value.cause, AccessAPIError)
    assert str(info.value).startswith("get collection ID 0x1 failed: invalid error response")


def test_url_builder_with_query(handler):
    url = handler.build_url(
        "/test", ExpandOpts(["foo", "bar"]), SelectOpts(["zoo", "moo"])
    )
    parts = urlsplit(url)
    assert parts.query == "expands=foo%2Cbar&select=zoo%2Cmoo"
    assert parts.path == "/v1/test"


def test_url_builder_without_options(handler):
    assert handler.build_url("/blocks") == f"{BASE}/blocks"


def test_query_options():
    assert ExpandOpts(["a", "b"]).to_query() == ("expands", "a,b")
    assert SelectOpts(["c"]).to_query() == ("select", "c")


def test_http_error_fields():
    err = HTTPError(url="/", code=404, message="block not found")
    assert str(err) == "block not found"
    assert (err.url, err.code) == ("/", 404)


def test_access_api_error_message():
    assert str(AccessAPIError("outer", ValueError("inner"))) == "outer: inner"
    assert str(AccessAPIError("alone")) == "alone"


def test_invalid_host():
    with pytest.raises(ValueError):
        HTTPHandler("http://[::1")