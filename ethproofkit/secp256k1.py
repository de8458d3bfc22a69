"""ECDSA over secp256k1 with Ethereum-style recoverable signatures."""

from __future__ import annotations

import hashlib
import hmac
import string
from dataclasses import dataclass
from typing import Optional, Tuple

from .merkle_patricia import keccak256

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

_HEX_DIGITS = frozenset(string.hexdigits)
_Point = Optional[Tuple[int, int, int]]
_G: _Point = (GX, GY, 1)


def _double(point: _Point) -> _Point:
    if point is None:
        return None
    x, y, z = point
    if y == 0:
        return None
    yy = y * y % P
    s = 4 * x * yy % P
    m = 3 * x * x % P
    nx = (m * m - 2 * s) % P
    ny = (m * (s - nx) - 8 * yy * yy) % P
    nz = 2 * y * z % P
    return nx, ny, nz


def _add(first: _Point, second: _Point) -> _Point:
    if first is None:
        return second
    if second is None:
        return first
    x1, y1, z1 = first
    x2, y2, z2 = second
    z1z1 = z1 * z1 % P
    z2z2 = z2 * z2 % P
    u1 = x1 * z2z2 % P
    u2 = x2 * z1z1 % P
    s1 = y1 * z2 * z2z2 % P
    s2 = y2 * z1 * z1z1 % P
    if u1 == u2:
        return _double(first) if s1 == s2 else None
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    hh = h * h % P
    hhh = h * hh % P
    u1hh = u1 * hh % P
    x3 = (r * r - hhh - 2 * u1hh) % P
    y3 = (r * (u1hh - x3) - s1 * hhh) % P
    z3 = h * z1 * z2 % P
    return x3, y3, z3


def _multiply(point: _Point, scalar: int) -> _Point:
    result: _Point = None
    for bit in bin(scalar)[2:]:
        result = _double(result)
        if bit == "1":
            result = _add(result, point)
    return result


def _to_affine(point: _Point) -> Tuple[int, int]:
    if point is None:
        raise ValueError("point at infinity has no affine coordinates")
    x, y, z = point
    z_inv = pow(z, -1, P)
    z_inv2 = z_inv * z_inv % P
    return x * z_inv2 % P, y * z_inv2 * z_inv % P


def _encode_point(x: int, y: int) -> bytes:
    return x.to_bytes(32, "big") + y.to_bytes(32, "big")


def _hash_to_int(message_hash) -> int:
    raw = bytes(message_hash)
    if len(raw) != 32:
        raise ValueError(f"message hash must be 32 bytes, got {len(raw)}")
    return int.from_bytes(raw, "big")


def parse_private_key(private_key) -> int:
    """Return a private key given as hex text, 32 bytes or int, checked for range."""
    if isinstance(private_key, bool):
        raise TypeError("a boolean is not a private key")
    if isinstance(private_key, int):
        value = private_key
    elif isinstance(private_key, (bytes, bytearray, memoryview)):
        raw = bytes(private_key)
        if len(raw) != 32:
            raise ValueError(f"private key must be 32 bytes, got {len(raw)}")
        value = int.from_bytes(raw, "big")
    elif isinstance(private_key, str):
        text = private_key.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != 64 or not all(char in _HEX_DIGITS for char in text):
            raise ValueError("invalid private key: expected 32 bytes of hex")
        value = int(text, 16)
    else:
        raise TypeError(f"cannot use {type(private_key).__name__} as a private key")
    if not 1 <= value < N:
        raise ValueError("private key is out of range for secp256k1")
    return value


def _public_key(private_key) -> bytes:
    return _encode_point(*_to_affine(_multiply(_G, parse_private_key(private_key))))


def public_key_to_address(public_key) -> bytes:
    """Return the 20-byte Ethereum address of an uncompressed public key."""
    raw = bytes(public_key)
    if len(raw) == 65 and raw[0] == 0x04:
        raw = raw[1:]
    if len(raw) != 64:
        raise ValueError("public key must be 64 bytes, or 65 bytes with a 0x04 prefix")
    return keccak256(raw)[-20:]


def private_key_to_address(private_key) -> bytes:
    """Return the 20-byte Ethereum address belonging to ``private_key``."""
    return public_key_to_address(_public_key(private_key))


def _recovery_id(v: int) -> int:
    if v in (0, 1):
        return v
    if v in (27, 28):
        return v - 27
    if v >= 35:
        return (v - 35) % 2
    raise ValueError(f"invalid recovery value v={v}")


@dataclass(frozen=True)
class Signature:
    """A recoverable ECDSA signature with Ethereum's ``v`` of 27 or 28."""

    r: int
    s: int
    v: int

    def recover(self, message_hash) -> bytes:
        """Return the address of the key that signed ``message_hash``."""
        public_key = recover_public_key(message_hash, self.r, self.s, _recovery_id(self.v))
        return public_key_to_address(public_key)

    def to_bytes(self) -> bytes:
        """Serialise as 65 bytes: r, s, then v."""
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + self.v.to_bytes(1, "big")

    def __str__(self) -> str:
        return "0x" + self.to_bytes().hex()


def _nonces(secret: int, message_hash: bytes):
    """Deterministic nonce candidates per RFC 6979 with HMAC-SHA256."""
    x = secret.to_bytes(32, "big")
    h1 = (int.from_bytes(message_hash, "big") % N).to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac.new(k, v + b"\x00" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    k = hmac.new(k, v + b"\x01" + x + h1, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    while True:
        v = hmac.new(k, v, hashlib.sha256).digest()
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < N:
            yield candidate
        k = hmac.new(k, v + b"\x00", hashlib.sha256).digest()
        v = hmac.new(k, v, hashlib.sha256).digest()


def sign_hash(private_key, message_hash) -> Signature:
    """Sign a 32-byte hash deterministically, with ``s`` in the lower half order."""
    secret = parse_private_key(private_key)
    digest = bytes(message_hash)
    e = _hash_to_int(digest)
    for nonce in _nonces(secret, digest):
        rx, ry = _to_affine(_multiply(_G, nonce))
        r = rx % N
        if r == 0:
            continue
        s = pow(nonce, -1, N) * (e + r * secret) % N
        if s == 0:
            continue
        recovery_id = (ry & 1) | (2 if rx >= N else 0)
        if s > N // 2:
            s = N - s
            recovery_id ^= 1
        return Signature(r=r, s=s, v=27 + (recovery_id & 1))
    raise RuntimeError("nonce generation ended")  # the generator never ends


def recover_public_key(message_hash, r: int, s: int, recovery_id: int) -> bytes:
    """Return the 64-byte public key that produced (r, s) over ``message_hash``."""
    e = _hash_to_int(message_hash)
    if not 1 <= r < N or not 1 <= s < N:
        raise ValueError("signature values are out of range")
    if recovery_id not in (0, 1, 2, 3):
        raise ValueError(f"invalid recovery id {recovery_id}")
    x = r + (recovery_id >> 1) * N
    if x >= P:
        raise ValueError("signature cannot be recovered")
    alpha = (pow(x, 3, P) + 7) % P
    y = pow(alpha, (P + 1) // 4, P)
    if y * y % P != alpha:
        raise ValueError("signature cannot be recovered")
    if y & 1 != recovery_id & 1:
        y = P - y
    r_inv = pow(r, -1, N)
    point = _add(
        _multiply((x, y, 1), s * r_inv % N),
        _multiply(_G, (-e * r_inv) % N),
    )
    if point is None:
        raise ValueError("signature recovers to the point at infinity")
    return _encode_point(*_to_affine(point))