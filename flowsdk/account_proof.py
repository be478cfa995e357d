"""Account proof messages for signing."""

from __future__ import annotations

import re

from flowsdk import rlp
from flowsdk.address import Address

ACCOUNT_PROOF_NONCE_MIN_LEN_BYTES = 32

_HEX = re.compile(r"[0-9a-fA-F]*")


class InvalidNonceError(ValueError):
    """The account proof nonce is invalid."""


class InvalidAppIDError(ValueError):
    """The account proof app ID is invalid."""


def _decode_hex(text: str) -> bytes:
    if not _HEX.fullmatch(text):
        bad = next(ch for ch in text if ch not in "0123456789abcdefABCDEF")
        raise ValueError(f"invalid hex byte {bad!r}")
    if len(text) % 2 == 1:
        raise ValueError("odd length hex string")
    return bytes.fromhex(text)


def encode_account_proof_message(address: Address, app_id: str, nonce_hex: str) -> bytes:
    """Build the RLP account proof message to sign, without the user domain tag."""
    if app_id == "":
        raise InvalidAppIDError("invalid app ID: appID can't be empty")

    trimmed = nonce_hex[2:] if nonce_hex.startswith("0x") else nonce_hex
    try:
        nonce = _decode_hex(trimmed)
    except ValueError as exc:
        raise InvalidNonceError(f"invalid nonce: {exc}") from exc

    if len(nonce) < ACCOUNT_PROOF_NONCE_MIN_LEN_BYTES:
        raise InvalidNonceError(
            f"invalid nonce: nonce must be at least {ACCOUNT_PROOF_NONCE_MIN_LEN_BYTES} bytes"
        )

    return rlp.encode([app_id, bytes(address), nonce])