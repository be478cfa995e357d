"""Flow blockchain library: RLP, addresses, account keys and proofs, entities and an HTTP Access API client."""

__version__ = "0.1.0"