"""Verification of Ethereum Merkle Patricia trie proofs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from Crypto.Hash import keccak

from . import rlp

_BRANCH_ITEMS = 17
_PAIR_ITEMS = 2
_LEAF = 0x2
_EXTENSION = 0x1


class ProofError(Exception):
    """Base class for proof verification failures."""


class RlpDecodingError(ProofError):
    """A proof node or value is not valid RLP of the expected shape."""


class InvalidProofError(ProofError):
    """The proof is structurally invalid or incomplete."""


class HashMismatchError(ProofError):
    """A proof node does not hash to the expected value."""


class InvalidPathError(ProofError):
    """A node carries an unsupported path type."""


@dataclass(frozen=True)
class AccountData:
    """Account record as stored in Ethereum's state trie."""

    nonce: int
    balance: int
    storage_root: bytes
    code_hash: bytes


class NibbleSlice:
    """Read-only view of bytes as a sequence of 4-bit nibbles."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def at(self, i: int) -> int:
        byte = self._data[i // 2]
        return byte >> 4 if i % 2 == 0 else byte & 0x0F

    def __len__(self) -> int:
        return len(self._data) * 2


def keccak256(data) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    digest = keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return digest.digest()


def encode_path(key) -> bytes:
    """Split each byte of ``key`` into its high and low nibble."""
    return bytes(nibble for byte in bytes(key) for nibble in (byte >> 4, byte & 0x0F))


def decode_compact(encoded) -> Tuple[int, bytes]:
    """Decode hex-prefix encoding into (node type flag, nibbles)."""
    raw = bytes(encoded)
    if not raw:
        raise ValueError("compact path is empty")
    node_type = raw[0] >> 4
    rest = encode_path(raw[1:])
    if node_type in (0, 2):
        return node_type, rest
    return node_type, bytes([raw[0] & 0x0F]) + rest


def _require_length(value, size: int, what: str) -> bytes:
    raw = bytes(value)
    if len(raw) != size:
        raise ValueError(f"{what} must be {size} bytes, got {len(raw)}")
    return raw


def _decode_item(data: bytes):
    try:
        return rlp.decode(data)
    except rlp.DecoderError as exc:
        raise RlpDecodingError(str(exc)) from exc


def _decode_list(data: bytes) -> list:
    item = _decode_item(data)
    if not isinstance(item, list):
        raise RlpDecodingError("RLP expected to be a list")
    return item


def _as_bytes(item) -> bytes:
    if isinstance(item, list):
        raise RlpDecodingError("RLP expected to be data")
    return item


def _as_hash(item) -> bytes:
    raw = _as_bytes(item)
    if len(raw) < 32:
        raise RlpDecodingError("RLP is too short for a 32-byte hash")
    if len(raw) > 32:
        raise RlpDecodingError("RLP is too big for a 32-byte hash")
    return raw


def _as_uint(item) -> int:
    try:
        return rlp.decode_int(_as_bytes(item))
    except rlp.DecoderError as exc:
        raise RlpDecodingError(str(exc)) from exc


def _is_empty(item) -> bool:
    return item == b"" or item == []


def verify_proof(root_hash, key, proof: Sequence[bytes]) -> Optional[bytes]:
    """Walk ``proof`` from ``root_hash`` along ``key``; return the value or None."""
    expected_hash = _require_length(root_hash, 32, "root hash")
    key_nibbles = encode_path(key)
    key_index = 0

    for node in proof:
        node_data = bytes(node)
        if keccak256(node_data) != expected_hash:
            raise HashMismatchError("Invalid proof: hash mismatch")

        items = _decode_list(node_data)

        if len(items) == _BRANCH_ITEMS:
            if key_index >= len(key_nibbles):
                value = items[16]
                return None if _is_empty(value) else _as_bytes(value)
            child = items[key_nibbles[key_index]]
            key_index += 1
            if _is_empty(child):
                return None
            expected_hash = _as_hash(child)

        elif len(items) == _PAIR_ITEMS:
            path = _as_bytes(items[0])
            try:
                node_type, node_path = decode_compact(path)
            except ValueError as exc:
                raise InvalidPathError(str(exc)) from exc

            if node_type == _LEAF:
                if key_nibbles[key_index:] != node_path:
                    return None
                return _as_bytes(items[1])
            if node_type == _EXTENSION:
                end = key_index + len(node_path)
                if end > len(key_nibbles):
                    return None
                if key_nibbles[key_index:end] != node_path:
                    return None
                key_index = end
                expected_hash = _as_hash(items[1])
            else:
                raise InvalidPathError("Invalid node type")
        else:
            raise InvalidProofError("Invalid node format")

    raise InvalidProofError("Proof too short")


def verify_account_proof(state_root, address, account_proof) -> Optional[AccountData]:
    """Verify an account proof against ``state_root`` and decode the account."""
    address = _require_length(address, 20, "address")
    account_rlp = verify_proof(state_root, keccak256(address), account_proof)
    if account_rlp is None:
        return None

    fields = _decode_list(account_rlp)
    if len(fields) < 4:
        raise RlpDecodingError("RLP is too short for an account")
    return AccountData(
        nonce=_as_uint(fields[0]),
        balance=_as_uint(fields[1]),
        storage_root=_as_hash(fields[2]),
        code_hash=_as_hash(fields[3]),
    )


def verify_storage_proof(storage_root, key, storage_proof) -> Optional[int]:
    """Verify a storage slot proof and return the stored integer, if any."""
    key = _require_length(key, 32, "storage key")
    value_rlp = verify_proof(storage_root, keccak256(key), storage_proof)
    if value_rlp is None:
        return None
    return _as_uint(_decode_item(value_rlp))


def verify_eth_proof(
    state_root, address, key, account_proof, storage_proof
) -> Tuple[Optional[AccountData], Optional[int]]:
    """Verify the account proof; the storage value is currently never checked."""
    account = verify_account_proof(state_root, address, account_proof)
    if account is None:
        return None, None
    return account, None