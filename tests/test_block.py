from datetime import datetime, timezone

import pytest

from flowsdk.block import (
    Block,
    BlockHeader,
    BlockPayload,
    BlockSeal,
    Identifier,
    hash_to_id,
    hex_to_id,
)
from flowsdk.collection import CollectionGuarantee

FULL_HEX = "11" * 16 + "ab" * 16


def test_hex_to_id_round_trip():
    assert hex_to_id(FULL_HEX).hex() == FULL_HEX
    assert str(hex_to_id(FULL_HEX)) == FULL_HEX


def test_hex_to_id_prefix():
    assert hex_to_id("0x" + FULL_HEX) == hex_to_id(FULL_HEX)


def test_hex_to_id_short_input_is_zero_filled():
    short = hex_to_id("0x1")
    assert short.data[0] == 1
    assert short.data[1:] == bytes(31)


def test_hash_to_id():
    digest = bytes(range(32))
    assert hash_to_id(digest).data == digest
    assert hash_to_id(digest) == Identifier(digest)


def test_identifier_length_validation():
    with pytest.raises(ValueError):
        Identifier(b"\x00" * 5)


def test_default_identifier_is_zero():
    assert Identifier().data == bytes(32)


def test_block_delegates_to_header_and_payload():
    block_id = hex_to_id(FULL_HEX)
    parent = hash_to_id(bytes(range(32)))
    stamp = datetime(2022, 1, 1, tzinfo=timezone.utc)
    guarantee = CollectionGuarantee(collection_id=parent)
    seal = BlockSeal(block_id=parent, execution_receipt_id=block_id)

    block = Block(
        header=BlockHeader(id=block_id, parent_id=parent, height=7, timestamp=stamp),
        payload=BlockPayload(collection_guarantees=[guarantee], seals=[seal]),
    )

    assert block.id == block_id
    assert block.parent_id == parent
    assert block.height == 7
    assert block.timestamp == stamp
    assert block.collection_guarantees == [guarantee]
    assert block.seals == [seal]


def test_block_payload_defaults_are_independent():
    first = BlockPayload()
    second = BlockPayload()
    first.seals.append(BlockSeal())
    assert second.seals == []