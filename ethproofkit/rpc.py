"""Fetching Ethereum account proofs over JSON-RPC and checking them locally."""

from __future__ import annotations

import argparse
import itertools
import os
import string
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

import requests

from .guest import ProofInput, ProofOutput, run_proof
from .signing import parse_address

ANVIL_URL = "http://localhost:8545"
ANVIL_URL_ENV = "ANVIL_URL"
ALCHEMY_KEY_ENV = "ALCHEMY_API_KEY"
ALCHEMY_BASE_URL_ENV = "ALCHEMY_BASE_URL"
ARCHIVE_URL_ENV = "ETH_ARCHIVE_URL"
DEFAULT_BLOCK = 22406754
ZERO_SLOT = bytes(32)
DEFAULT_TIMEOUT = 30.0

_HEX_DIGITS = frozenset(string.hexdigits)


class NodeKind(Enum):
    """Which kind of node to try first when connecting."""

    ANVIL = "anvil"
    ALCHEMY = "alchemy"
    ETH_ARCHIVE = "archive"


class RpcError(Exception):
    """A node could not be reached or answered with an error."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message if code is None else f"{message} (code {code})")
        self.message = message
        self.code = code


def _hex_digits(text) -> str:
    if not isinstance(text, str) or text[:2].lower() != "0x":
        raise ValueError(f"expected a 0x-prefixed hex string, got {text!r}")
    digits = text[2:]
    if not all(char in _HEX_DIGITS for char in digits):
        raise ValueError(f"invalid hex string {text!r}")
    return digits


def _hex_int(text) -> int:
    return int(_hex_digits(text) or "0", 16)


def _hex_bytes(text) -> bytes:
    digits = _hex_digits(text)
    if len(digits) % 2:
        raise ValueError(f"hex string {text!r} has an odd number of digits")
    return bytes.fromhex(digits)


def _to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _block_param(block) -> str:
    if block is None:
        return "latest"
    if isinstance(block, bool):
        raise TypeError("a boolean is not a block identifier")
    if isinstance(block, int):
        if block < 0:
            raise ValueError("block number must not be negative")
        return hex(block)
    if isinstance(block, str):
        return block
    raise TypeError(f"cannot use {type(block).__name__} as a block identifier")


@dataclass(frozen=True)
class _StorageProof:
    key: bytes
    value: int
    proof: Tuple[bytes, ...]


@dataclass(frozen=True)
class AccountProof:
    """An ``eth_getProof`` answer: account fields and Merkle proof nodes."""

    address: bytes
    balance: int
    nonce: int
    code_hash: bytes
    storage_hash: bytes
    account_proof: Tuple[bytes, ...]
    storage_proof: Tuple[_StorageProof, ...]

    @classmethod
    def from_rpc(cls, data) -> "AccountProof":
        """Build from the JSON object a node returns for ``eth_getProof``."""
        try:
            return cls(
                address=_hex_bytes(data["address"]),
                balance=_hex_int(data["balance"]),
                nonce=_hex_int(data["nonce"]),
                code_hash=_hex_bytes(data["codeHash"]),
                storage_hash=_hex_bytes(data["storageHash"]),
                account_proof=tuple(_hex_bytes(node) for node in data["accountProof"]),
                storage_proof=tuple(
                    _StorageProof(
                        key=_hex_bytes(entry["key"]),
                        value=_hex_int(entry["value"]),
                        proof=tuple(_hex_bytes(node) for node in entry["proof"]),
                    )
                    for entry in data.get("storageProof", [])
                ),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise RpcError(f"malformed proof response: {exc}") from exc


class EthProvider:
    """A JSON-RPC client for one Ethereum node over HTTP."""

    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT, session=None) -> None:
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"invalid node URL: {url!r}")
        self.url = url
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._ids = itertools.count(1)

    def __enter__(self) -> "EthProvider":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _call(self, method: str, params: Sequence):
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            raise RpcError(f"request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"node at {self.url} returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise RpcError("node returned a response that is not an object")
        if body.get("error") is not None:
            error = body["error"]
            if isinstance(error, dict):
                raise RpcError(str(error.get("message", "unknown error")), error.get("code"))
            raise RpcError(str(error))
        if "result" not in body:
            raise RpcError("node response carries no result")
        return body["result"]

    def get_block_number(self) -> int:
        """Return the number of the latest block."""
        result = self._call("eth_blockNumber", [])
        try:
            return _hex_int(result)
        except ValueError as exc:
            raise RpcError(f"malformed block number: {exc}") from exc

    def get_block(self, block) -> Optional[dict]:
        """Return the block header object, or None if the node does not know it."""
        result = self._call("eth_getBlockByNumber", [_block_param(block), False])
        if result is None:
            return None
        if not isinstance(result, dict):
            raise RpcError("malformed block response")
        return result

    def get_proof(self, address, storage_keys: Sequence, block=None) -> AccountProof:
        """Fetch the account and storage proofs for ``address`` at ``block``."""
        raw_address = parse_address(address)
        keys: List[str] = []
        for key in storage_keys:
            raw_key = bytes(key)
            if len(raw_key) != 32:
                raise ValueError(f"storage key must be 32 bytes, got {len(raw_key)}")
            keys.append(_to_hex(raw_key))
        result = self._call("eth_getProof", [_to_hex(raw_address), keys, _block_param(block)])
        return AccountProof.from_rpc(result)


def _state_root(block_data: dict) -> bytes:
    try:
        root = _hex_bytes(block_data["stateRoot"])
    except (KeyError, ValueError) as exc:
        raise RpcError(f"malformed block: {exc}") from exc
    if len(root) != 32:
        raise RpcError("malformed block: state root is not 32 bytes")
    return root


def _responds(provider: EthProvider) -> bool:
    try:
        provider.get_block_number()
    except RpcError:
        return False
    return True


def setup_eth_provider(node_type: NodeKind = NodeKind.ALCHEMY) -> EthProvider:
    """Connect to the preferred node, falling back to the archive node.

    Node URLs come from the environment: ``ANVIL_URL`` (defaulting to the
    local Anvil port), ``ALCHEMY_BASE_URL`` with ``ALCHEMY_API_KEY``, and
    ``ETH_ARCHIVE_URL`` for the fallback.
    """
    if node_type is NodeKind.ANVIL:
        provider = EthProvider(os.environ.get(ANVIL_URL_ENV) or ANVIL_URL)
        if _responds(provider):
            print("Connected to local Anvil node")
            return provider
        provider.close()
    elif node_type is NodeKind.ALCHEMY:
        api_key = os.environ.get(ALCHEMY_KEY_ENV)
        base_url = os.environ.get(ALCHEMY_BASE_URL_ENV)
        if api_key is not None and base_url:
            provider = EthProvider(f"{base_url.rstrip('/')}/{api_key}")
            if _responds(provider):
                print("Connected to Ethereum via Alchemy")
                return provider
            provider.close()
    else:
        print("Gonna try archive node")

    url = os.environ.get(ARCHIVE_URL_ENV)
    if not url:
        raise RpcError(f"no archive node configured; set {ARCHIVE_URL_ENV}")
    print(f"Trying fallback archive node: {url}")
    provider = EthProvider(url)
    provider.get_block_number()
    print("Connected to Ethereum via archive node")
    return provider


def get_account_merkle_proof(provider: EthProvider, account_address, block) -> AccountProof:
    """Check that ``block`` exists, then fetch the account proof with slot zero."""
    address = parse_address(account_address)
    print(f"Getting block details for block: {block}")
    block_data = provider.get_block(block)
    if block_data is None:
        raise RpcError("Block not found")
    state_root = _state_root(block_data)
    print(f"Got state root: {_to_hex(state_root)}")

    print(f"Getting proof for address: {_to_hex(address)} at block: {block}")
    proof = provider.get_proof(address, [ZERO_SLOT], None)
    print(f"Got proof, account has balance: {proof.balance}")
    return proof


def build_proof_input(proof: AccountProof, state_root, address, slot=None) -> ProofInput:
    """Turn a fetched proof into the input of the proof check."""
    storage_proof = None
    if slot is not None:
        if not proof.storage_proof:
            raise ValueError("proof holds no storage proof for the requested slot")
        storage_proof = list(proof.storage_proof[0].proof)
    return ProofInput(
        state_root=bytes(state_root),
        address=parse_address(address),
        account_proof=list(proof.account_proof),
        slot_key=None if slot is None else bytes(slot),
        storage_proof=storage_proof,
    )


def _print_output(output: ProofOutput, source: str) -> None:
    print(f"Account exists: {str(output.exists).lower()}")
    if not output.exists:
        return
    print(f"Account details from {source}:")
    print(f"  Nonce: {output.nonce}")
    print(f"  Balance: {output.balance}")
    print(f"  Storage Root: {_to_hex(output.storage_root)}")
    print(f"  Code Hash: {_to_hex(output.code_hash)}")
    if output.storage_value is not None:
        print(f"Storage value: {output.storage_value}")


def main(argv=None) -> int:
    """Fetch an account proof from a node and verify it against the state root."""
    parser = argparse.ArgumentParser(description="Fetch and verify an Ethereum account proof.")
    parser.add_argument("address", help="account address as 0x-prefixed hex")
    parser.add_argument("--block", type=int, default=DEFAULT_BLOCK)
    parser.add_argument(
        "--node", choices=[kind.value for kind in NodeKind], default=NodeKind.ALCHEMY.value
    )
    args = parser.parse_args(argv)

    try:
        address = parse_address(args.address)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        with setup_eth_provider(NodeKind(args.node)) as provider:
            print(f"Getting block details for block: {args.block}")
            block_data = provider.get_block(args.block)
            if block_data is None:
                raise RpcError("Block not found")
            state_root = _state_root(block_data)
            print(f"Got state root: {_to_hex(state_root)}")

            print(f"Getting proof for address: {_to_hex(address)} at block: {args.block}")
            proof = provider.get_proof(address, [ZERO_SLOT], args.block)
            print(f"Got proof, account has balance: {proof.balance}")

            proof_input = build_proof_input(proof, state_root, address, ZERO_SLOT)
    except (RpcError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Running proof verification...")
    output = run_proof(proof_input)
    print("Execution verification successful!")
    _print_output(output, "execution")
    return 0