"""Collections of transactions and their guarantees."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from flowsdk import rlp
from flowsdk.block import EMPTY_ID, Identifier, hash_to_id


@dataclass
class Collection:
    """A list of transactions bundled together for inclusion in a block."""

    transaction_ids: list[Identifier] = field(default_factory=list)

    def encode(self) -> bytes:
        """Canonical RLP byte representation of this collection."""
        return rlp.encode([[bytes(tx_id) for tx_id in self.transaction_ids]])

    def id(self) -> Identifier:
        """Canonical SHA3-256 hash of this collection."""
        return hash_to_id(hashlib.sha3_256(self.encode()).digest())


@dataclass
class CollectionGuarantee:
    """Attestation signed by the nodes that have guaranteed a collection."""

    collection_id: Identifier = EMPTY_ID