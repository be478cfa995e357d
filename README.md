# flowsdk

A Python library for working with the Flow blockchain. It provides:

- **RLP** encoding and decoding (`flowsdk.rlp`).
- **Addresses**: parsing, deterministic generation and off-chain format
  validation of 8-byte Flow account addresses for each network
  (`flowsdk.address`).
- **Account keys**: signature/hash algorithm pairs, key weights and the
  canonical RLP encoding of a key (`flowsdk.account`).
- **Account proofs**: the message a wallet signs to prove it controls an
  address (`flowsdk.account_proof`).
- **Blocks, collections, transactions, events and execution results** as
  plain data classes (`flowsdk.block`, `flowsdk.collection`,
  `flowsdk.entities`).
- **An HTTP Access API client** (`flowsdk.access`) for reading blocks,
  accounts, collections, transactions, events and execution results, sending
  transactions and running scripts.

## Installation

```
pip install flowsdk
```

The only runtime dependency is `requests`. The `test` extra installs
`pytest` and `responses` for the test suite.

## RLP

```python
from flowsdk import rlp

data = rlp.encode(["dog", b"\x01\x02", 1024, []])
assert rlp.decode(data) == [b"dog", b"\x01\x02", b"\x04\x00", []]
```

`encode` accepts bytes, strings (UTF-8), non-negative integers and nested
lists or tuples. `decode` returns `bytes` and `list` items and raises
`RLPDecodeError` for truncated, trailing or non-canonical input.

## Addresses

```python
from flowsdk.address import AddressGenerator, ChainID, hex_to_address, service_address

gen = AddressGenerator(ChainID.MAINNET)
first = gen.next_address()
assert first == service_address(ChainID.MAINNET)
assert first.is_valid(ChainID.MAINNET)
assert not first.is_valid(ChainID.TESTNET)

addr = hex_to_address("0x" + first.hex())
assert addr == first
```

- `hex_to_address` accepts strings with or without `0x`, pads odd lengths
  and stops at the first invalid pair of characters; `bytes_to_address`
  crops from the left or zero-pads at the front.
- `Address.is_valid(chain)` checks the code word against the parity-check
  matrix of the chain; the zero address is never valid.
- `AddressGenerator.set_index` fast-forwards or rewinds the state;
  `next()` raises `OverflowError` once the state passes the maximum of
  2^45 - 1.
- `ChainID` covers mainnet, testnet, stagingnet, emulator, localnet,
  benchnet and the BFT testnet.

## Account keys

```python
from flowsdk.account import (
    AccountKey, HashAlgorithm, SignatureAlgorithm, decode_account_key,
)

key = AccountKey(
    public_key=bytes(64),
    sig_algo=SignatureAlgorithm.ECDSA_P256,
    hash_algo=HashAlgorithm.SHA3_256,
    weight=1000,
)
key.validate()
assert decode_account_key(key.encode()).weight == 1000
```

`validate` raises `InvalidAccountKeyError` unless the signature algorithm is
ECDSA P-256 or secp256k1, the hash algorithm is SHA2-256 or SHA3-256, and the
weight is between 0 and 1000. `decode_account_key` also checks the length of
the encoded public key for its algorithm. `SignatureAlgorithm.from_string`
and `HashAlgorithm.from_string` parse algorithm names, including the spellings
used by the HTTP API, and give `UNKNOWN` for anything else.

## Account proofs

```python
from flowsdk.account_proof import encode_account_proof_message
from flowsdk.address import hex_to_address

message = encode_account_proof_message(
    hex_to_address("ABC123DEF456"),
    "AWESOME-APP-ID",
    "3037366134636339643564623330316636626239323161663465346131393662",
)
```

An empty app ID raises `InvalidAppIDError`; a nonce that is not hex, or is
shorter than 32 bytes, raises `InvalidNonceError`. The message does not
include a domain tag.

## Collections and identifiers

`Collection.encode()` gives the canonical RLP encoding of the transaction
IDs and `Collection.id()` its SHA3-256 hash as an `Identifier`. `hex_to_id`
and `hash_to_id` build 32-byte identifiers.

## Access API over HTTP

```python
from flowsdk.access.client import TESTNET_HOST, new_client

with new_client(TESTNET_HOST) as client:
    block = client.get_latest_block(is_sealed=True)
    print(block.height, block.id.hex())

    account = client.get_account(block_author_address)  # any Address
    events = client.get_events_for_height_range("A.Foo.Bar", 100, 110)
    result = client.execute_script_at_latest_block(b"...", ["Hello"])
```

- `Client` (from `new_client`) exposes the common calls: blocks and headers
  by ID, height or latest, collections, transactions and their results,
  accounts, scripts, events and execution results.
- `BaseClient` (from `new_base_client`) takes a `HeightQuery` (a list of
  heights, or a start and end range) and request options `ExpandOpts` and
  `SelectOpts` from `flowsdk.access.handler`. The special heights `FINAL`
  and `SEALED` are sent as `final` and `sealed`.
- Script arguments are JSON-Cadence values: mappings with a `type` key, or
  plain `str`, `int`, `bool`, `None` and lists of these. Script results and
  event values come back as their JSON-Cadence dictionaries.
- An error response raises `HTTPError` with `url`, `code` and the server's
  `message`; other failures raise `AccessAPIError`, whose `cause` holds the
  underlying error. Invalid height queries raise `ValueError`.
- `HTTPHandler` performs the requests with a `requests.Session` and decodes
  responses into the data classes of `flowsdk.access.models`, whose
  `to_dict` and `from_dict` map to and from the API's JSON.
  `flowsdk.access.convert` turns those models into the entities above.

## What this package does not do

- It has no gRPC client; only the HTTP Access API is supported.
- It does not generate keys, sign transactions or verify signatures, and it
  does not compute transaction IDs.
- Fetching the latest protocol state snapshot raises `AccessAPIError`: the
  HTTP API does not offer it.
- Cadence values are handled as their JSON-Cadence dictionaries; there are
  no typed Cadence value classes.