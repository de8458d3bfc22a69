"""Ethereum personal-message signing and signature verification."""

from __future__ import annotations

import string
from typing import List, Sequence

from .merkle_patricia import keccak256
from .secp256k1 import Signature, private_key_to_address, sign_hash

_PREFIX = b"\x19Ethereum Signed Message:\n"
_HEX_DIGITS = frozenset(string.hexdigits)


def _message_bytes(message) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def hash_message(message) -> bytes:
    """Keccak-256 of the message with Ethereum's signed-message prefix."""
    data = _message_bytes(message)
    return keccak256(_PREFIX + str(len(data)).encode("ascii") + data)


def parse_address(address) -> bytes:
    """Return a 20-byte address from hex text (with or without 0x) or bytes."""
    if isinstance(address, (bytes, bytearray, memoryview)):
        raw = bytes(address)
        if len(raw) != 20:
            raise ValueError(f"address must be 20 bytes, got {len(raw)}")
        return raw
    if isinstance(address, str):
        text = address.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != 40 or not all(char in _HEX_DIGITS for char in text):
            raise ValueError(f"invalid address: {address!r}")
        return bytes.fromhex(text)
    raise TypeError(f"cannot use {type(address).__name__} as an address")


def _format_address(address: bytes) -> str:
    return "0x" + address.hex()


def sign_message(private_key, message) -> Signature:
    """Sign ``message`` as an Ethereum personal message."""
    signature = sign_hash(private_key, hash_message(message))
    print(f"Signed message: '{message}'")
    print(f"With wallet: {_format_address(private_key_to_address(private_key))}")
    print(f"Signature: {signature}")
    return signature


def batch_sign_message(message, private_keys: Sequence) -> List[Signature]:
    """Sign one message with each of several keys, checking every signature."""
    signatures = []
    for number, private_key in enumerate(private_keys, start=1):
        address = private_key_to_address(private_key)
        print(f"\nBatch signing with wallet: {_format_address(address)}")
        signature = sign_hash(private_key, hash_message(message))
        is_valid = verify_signature(message, signature, address)
        print(f"Message {number}: '{message}' -> Valid: {str(is_valid).lower()}")
        signatures.append(signature)
    return signatures


def batch_sign_messages(private_key, messages: Sequence) -> List[Signature]:
    """Sign several messages with one key, checking every signature."""
    address = private_key_to_address(private_key)
    print(f"\nBatch signing with wallet: {_format_address(address)}")
    signatures = []
    for number, message in enumerate(messages, start=1):
        signature = sign_hash(private_key, hash_message(message))
        is_valid = verify_signature(message, signature, address)
        print(f"Message {number}: '{message}' -> Valid: {str(is_valid).lower()}")
        signatures.append(signature)
    return signatures


def verify_signature(message, signature: Signature, expected_address) -> bool:
    """Return whether ``signature`` over ``message`` came from ``expected_address``."""
    return signature.recover(hash_message(message)) == parse_address(expected_address)


def _pairs(messages: Sequence, signatures: Sequence):
    if len(messages) != len(signatures):
        raise ValueError("Messages and signatures length mismatch")
    return zip(messages, signatures)


def verify_signatures(messages: Sequence, signatures: Sequence[Signature], expected_address) -> bool:
    """Return whether every signature matches its message and the address."""
    return all(
        verify_signature(message, signature, expected_address)
        for message, signature in _pairs(messages, signatures)
    )


def batch_verify_signatures(
    messages: Sequence, signatures: Sequence[Signature], expected_address
) -> List[bool]:
    """Return the verification result for each message and signature pair."""
    return [
        verify_signature(message, signature, expected_address)
        for message, signature in _pairs(messages, signatures)
    ]


def get_wallet_address(private_key) -> bytes:
    """Return the 20-byte address belonging to ``private_key``."""
    return private_key_to_address(private_key)