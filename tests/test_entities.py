from flowsdk.address import EMPTY_ADDRESS
from flowsdk.block import EMPTY_ID, Identifier, hex_to_id
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


def test_state_commitment_full_length():
    text = "ab" * 32
    commitment = hex_to_state_commitment(text)
    assert bytes(commitment) == bytes.fromhex(text)
    assert commitment.hex() == text


def test_state_commitment_short_is_padded_at_end():
    commitment = hex_to_state_commitment("abcd")
    assert bytes(commitment)[:2] == b"\xab\xcd"
    assert bytes(commitment)[2:] == bytes(30)


def test_state_commitment_empty_and_invalid():
    assert hex_to_state_commitment("") == EMPTY_ID
    assert hex_to_state_commitment("zz") == EMPTY_ID


def test_state_commitment_stops_at_invalid_pair():
    commitment = hex_to_state_commitment("abzz")
    assert bytes(commitment)[:1] == b"\xab"
    assert bytes(commitment)[1:] == bytes(31)


def test_state_commitment_truncates_long_input():
    text = "11" * 32 + "22" * 4
    commitment = hex_to_state_commitment(text)
    assert bytes(commitment) == bytes.fromhex("11" * 32)


def test_transaction_defaults_are_independent():
    first = Transaction()
    second = Transaction()
    first.arguments.append(b"arg")
    first.authorizers.append(EMPTY_ADDRESS)
    first.payload_signatures.append(TransactionSignature())
    assert second.arguments == []
    assert second.authorizers == []
    assert second.payload_signatures == []
    assert first.proposal_key is not second.proposal_key
    assert second.proposal_key == ProposalKey()


def test_transaction_equality_by_value():
    ref = hex_to_id("0x1")
    first = Transaction(script=b"main() {}", reference_block_id=ref, gas_limit=10)
    second = Transaction(script=b"main() {}", reference_block_id=ref, gas_limit=10)
    assert first == second
    second.gas_limit = 11
    assert not first == second


def test_transaction_status_order_and_default():
    statuses = list(TransactionStatus)
    assert statuses[0] is TransactionStatus.UNKNOWN
    assert sorted(statuses) == statuses
    assert TransactionResult().status is TransactionStatus.UNKNOWN
    assert str(TransactionStatus.SEALED) == TransactionStatus.SEALED.name


def test_transaction_result_failed():
    assert TransactionResult().failed is False
    assert TransactionResult(error="boom").failed is True


def test_block_events_hold_events():
    event = Event(type="A.Foo.Bar", transaction_index=1, event_index=2, payload=b"{}")
    block_events = BlockEvents(block_id=hex_to_id("0x2"), height=5, events=[event])
    assert block_events.events[0].type == "A.Foo.Bar"
    assert block_events.height == 5
    assert BlockEvents().events == []


def test_execution_result_defaults():
    result = ExecutionResult()
    assert result.chunks == []
    assert result.service_events == []
    assert result.block_id == EMPTY_ID
    result.chunks.append(Chunk(number_of_transactions=2))
    result.service_events.append(ServiceEvent(type="t", payload=b"p"))
    assert ExecutionResult().chunks == []
    assert result.chunks[0].start_state == Identifier()
    assert result.service_events[0].payload == b"p"