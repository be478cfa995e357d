"""Flow accounts, account keys and the algorithms a key may use."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from flowsdk import rlp
from flowsdk.address import EMPTY_ADDRESS, Address

ACCOUNT_KEY_WEIGHT_THRESHOLD = 1000


class SignatureAlgorithm(IntEnum):
    """Signature algorithm of an account key."""

    UNKNOWN = 0
    BLS_BLS12_381 = 1
    ECDSA_P256 = 2
    ECDSA_SECP256K1 = 3

    def __str__(self) -> str:
        return _SIGNATURE_NAMES[self]

    @classmethod
    def from_string(cls, name: str) -> SignatureAlgorithm:
        """Parse an algorithm name; unrecognised names give ``UNKNOWN``."""
        return _SIGNATURE_BY_NAME.get(name, cls.UNKNOWN)


class HashAlgorithm(IntEnum):
    """Hash algorithm of an account key."""

    UNKNOWN = 0
    SHA2_256 = 1
    SHA2_384 = 2
    SHA3_256 = 3
    SHA3_384 = 4
    KECCAK_256 = 5
    KMAC128 = 6

    def __str__(self) -> str:
        return _HASH_NAMES[self]

    @classmethod
    def from_string(cls, name: str) -> HashAlgorithm:
        """Parse an algorithm name; unrecognised names give ``UNKNOWN``."""
        return _HASH_BY_NAME.get(name, cls.UNKNOWN)


_SIGNATURE_NAMES = {
    SignatureAlgorithm.UNKNOWN: "UNKNOWN",
    SignatureAlgorithm.BLS_BLS12_381: "BLS_BLS12_381",
    SignatureAlgorithm.ECDSA_P256: "ECDSA_P256",
    SignatureAlgorithm.ECDSA_SECP256K1: "ECDSA_secp256k1",
}

_SIGNATURE_BY_NAME = {
    **{name: algo for algo, name in _SIGNATURE_NAMES.items() if algo is not SignatureAlgorithm.UNKNOWN},
    # spellings used by the HTTP access API
    "BLSBLS12381": SignatureAlgorithm.BLS_BLS12_381,
    "ECDSAP256": SignatureAlgorithm.ECDSA_P256,
    "ECDSASecp256k1": SignatureAlgorithm.ECDSA_SECP256K1,
}

_HASH_NAMES = {
    HashAlgorithm.UNKNOWN: "UNKNOWN",
    HashAlgorithm.SHA2_256: "SHA2_256",
    HashAlgorithm.SHA2_384: "SHA2_384",
    HashAlgorithm.SHA3_256: "SHA3_256",
    HashAlgorithm.SHA3_384: "SHA3_384",
    HashAlgorithm.KECCAK_256: "Keccak256",
    HashAlgorithm.KMAC128: "KMAC128",
}

_HASH_BY_NAME = {
    name: algo for algo, name in _HASH_NAMES.items() if algo is not HashAlgorithm.UNKNOWN
}

_PUBLIC_KEY_LENGTHS = {
    SignatureAlgorithm.BLS_BLS12_381: 96,
    SignatureAlgorithm.ECDSA_P256: 64,
    SignatureAlgorithm.ECDSA_SECP256K1: 64,
}

_ACCOUNT_SIGNATURE_ALGORITHMS = frozenset(
    {SignatureAlgorithm.ECDSA_P256, SignatureAlgorithm.ECDSA_SECP256K1}
)
_ACCOUNT_HASH_ALGORITHMS = frozenset({HashAlgorithm.SHA2_256, HashAlgorithm.SHA3_256})


class InvalidAccountKeyError(ValueError):
    """An account key is invalid or cannot be decoded."""


def compatible_algorithms(sig_algo: SignatureAlgorithm, hash_algo: HashAlgorithm) -> bool:
    """Tell whether the pair of algorithms is valid for a key on a Flow account."""
    return sig_algo in _ACCOUNT_SIGNATURE_ALGORITHMS and hash_algo in _ACCOUNT_HASH_ALGORITHMS


def _check_public_key(sig_algo: SignatureAlgorithm, public_key: bytes) -> bytes:
    expected = _PUBLIC_KEY_LENGTHS.get(sig_algo)
    if expected is None:
        raise InvalidAccountKeyError(f"the signature scheme {sig_algo!s} is not supported")
    if len(public_key) != expected:
        raise InvalidAccountKeyError(
            f"input has incorrect {sig_algo!s} key size, got {len(public_key)}, expects {expected}"
        )
    return bytes(public_key)


@dataclass
class AccountKey:
    """A public key associated with an account."""

    index: int = 0
    public_key: bytes = b""
    sig_algo: SignatureAlgorithm = SignatureAlgorithm.UNKNOWN
    hash_algo: HashAlgorithm = HashAlgorithm.UNKNOWN
    weight: int = 0
    sequence_number: int = 0
    revoked: bool = False

    def encode(self) -> bytes:
        """Canonical RLP byte representation of this account key."""
        return rlp.encode(
            [bytes(self.public_key), int(self.sig_algo), int(self.hash_algo), self.weight]
        )

    def validate(self) -> None:
        """Raise :class:`InvalidAccountKeyError` if this account key is invalid."""
        if not compatible_algorithms(self.sig_algo, self.hash_algo):
            raise InvalidAccountKeyError(
                f"signing algorithm ({self.sig_algo!s}) and hashing algorithm "
                f"({self.hash_algo!s}) are not a valid pair for a Flow account key"
            )
        if not 0 <= self.weight <= ACCOUNT_KEY_WEIGHT_THRESHOLD:
            raise InvalidAccountKeyError(f"invalid key weight: {self.weight}")


def _to_uint(raw: bytes) -> int:
    if raw and raw[0] == 0:
        raise rlp.RLPDecodeError("non-canonical integer: leading zero bytes")
    return int.from_bytes(raw, "big")


def decode_account_key(data: bytes) -> AccountKey:
    """Decode the RLP byte representation of an account key."""
    item = rlp.decode(data)
    if not isinstance(item, list) or len(item) != 4 or not all(isinstance(e, bytes) for e in item):
        raise rlp.RLPDecodeError("account key must be an RLP list of four byte strings")
    encoded_public_key, raw_sig, raw_hash, raw_weight = item

    try:
        sig_algo = SignatureAlgorithm(_to_uint(raw_sig))
        hash_algo = HashAlgorithm(_to_uint(raw_hash))
    except ValueError as exc:
        if isinstance(exc, rlp.RLPDecodeError):
            raise
        raise InvalidAccountKeyError(str(exc)) from exc

    return AccountKey(
        public_key=_check_public_key(sig_algo, encoded_public_key),
        sig_algo=sig_algo,
        hash_algo=hash_algo,
        weight=_to_uint(raw_weight),
    )


@dataclass
class Account:
    """An account on the Flow network."""

    address: Address = EMPTY_ADDRESS
    balance: int = 0
    code: bytes = b""
    keys: list[AccountKey] = field(default_factory=list)
    contracts: dict[str, bytes] = field(default_factory=dict)