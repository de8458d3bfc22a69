"""Ethereum trie-proof verification, RLP, secp256k1 message signing, JSON-RPC proof fetching and TLS Notary presentation checks."""

__version__ = "0.1.0"

__all__ = ["guest", "merkle_patricia", "rlp", "rpc", "secp256k1", "signing", "tlsn"]