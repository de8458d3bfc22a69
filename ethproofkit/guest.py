"""Account proof verification job: proof input in, account summary out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .merkle_patricia import ProofError, verify_eth_proof


def _check_length(value, size: int, name: str) -> bytes:
    raw = bytes(value)
    if len(raw) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(raw)}")
    return raw


@dataclass
class ProofInput:
    """State root, account address and the proofs to check against them."""

    state_root: bytes
    address: bytes
    account_proof: List[bytes] = field(default_factory=list)
    slot_key: Optional[bytes] = None
    storage_proof: Optional[List[bytes]] = None

    def __post_init__(self) -> None:
        self.state_root = _check_length(self.state_root, 32, "state_root")
        self.address = _check_length(self.address, 20, "address")
        if self.slot_key is not None:
            self.slot_key = _check_length(self.slot_key, 32, "slot_key")
        self.account_proof = [bytes(node) for node in self.account_proof]
        if self.storage_proof is not None:
            self.storage_proof = [bytes(node) for node in self.storage_proof]


@dataclass(frozen=True)
class ProofOutput:
    """Result of a proof check; all details are None when the account is absent."""

    exists: bool = False
    nonce: Optional[int] = None
    balance: Optional[int] = None
    storage_root: Optional[bytes] = None
    code_hash: Optional[bytes] = None
    storage_value: Optional[int] = None


def run_proof(proof_input: ProofInput) -> ProofOutput:
    """Verify the account proof; a failed proof reports a missing account."""
    try:
        account, storage_value = verify_eth_proof(
            proof_input.state_root,
            proof_input.address,
            proof_input.slot_key,
            proof_input.account_proof,
            proof_input.storage_proof,
        )
    except ProofError:
        return ProofOutput()

    if account is None:
        return ProofOutput()
    return ProofOutput(
        exists=True,
        nonce=account.nonce,
        balance=account.balance,
        storage_root=account.storage_root,
        code_hash=account.code_hash,
        storage_value=storage_value,
    )