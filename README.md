# ethproofkit

Tools for checking Ethereum state without trusting the node that served it.

- `ethproofkit.rlp`: a self-contained RLP encoder and decoder.
- `ethproofkit.merkle_patricia`: verification of `eth_getProof` (EIP-1186)
  account and storage proofs against a state root, using Keccak-256.
- `ethproofkit.guest`: a proof check that takes a `ProofInput` and returns a
  `ProofOutput` summary of the account.
- `ethproofkit.secp256k1` and `ethproofkit.signing`: secp256k1 keys,
  recoverable signatures, and Ethereum personal-message signing and
  verification.
- `ethproofkit.tlsn`: parsing of TLS Notary presentation documents.
- `ethproofkit.rpc`: a JSON-RPC client that fetches blocks and account proofs
  from an Ethereum node and feeds them to the proof check.

## Installation

```console
pip install ethproofkit
```

To run the test suite:

```console
pip install "ethproofkit[test]"
pytest
```

## Verifying an account proof

```python
from ethproofkit.merkle_patricia import ProofError, verify_account_proof

try:
    account = verify_account_proof(state_root, address, account_proof)
except ProofError as exc:
    print("proof rejected:", exc)
else:
    if account is None:
        print("account does not exist at this state root")
    else:
        print("balance:", account.balance, "nonce:", account.nonce)
```

`state_root` is the 32-byte root from the block header, `address` the 20-byte
account address and `account_proof` the list of RLP-encoded trie nodes. The
result is an `AccountData` with `nonce`, `balance`, `storage_root` and
`code_hash`. A node that does not hash to the expected value raises
`HashMismatchError`; malformed nodes raise `RlpDecodingError`,
`InvalidPathError` or `InvalidProofError` (also raised when the proof ends
before reaching a value). All are subclasses of `ProofError`. Roots, addresses
and keys of the wrong length raise `ValueError`.

`verify_storage_proof(storage_root, key, storage_proof)` checks a storage slot
proof and returns the stored integer, or `None` when the slot is empty.

`verify_eth_proof(state_root, address, key, account_proof, storage_proof)`
returns a pair `(account, storage_value)`. Only the account proof is checked;
the storage value is always `None`.

`ethproofkit.guest.run_proof` wraps `verify_eth_proof`: it returns a
`ProofOutput` with `exists`, `nonce`, `balance`, `storage_root`, `code_hash`
and `storage_value`. A proof that fails verification is reported as
`exists=False` rather than raised.

## Signing and verifying messages

```python
from ethproofkit.signing import (
    batch_verify_signatures,
    get_wallet_address,
    sign_message,
    verify_signature,
)

def check(private_key: str) -> None:
    address = get_wallet_address(private_key)
    signature = sign_message(private_key, "Hello, world!")
    assert verify_signature("Hello, world!", signature, address)
```

Private keys may be 64 hex digits (with or without `0x`), 32 bytes or an int;
addresses may be 40 hex digits (with or without `0x`) or 20 bytes.
`get_wallet_address` returns the address as 20 bytes.

Messages are hashed with the `"\x19Ethereum Signed Message:\n"` prefix
(`hash_message`). Signatures are deterministic (RFC 6979), use the low-`s`
form and carry `v` as 27 or 28; `Signature.to_bytes()` gives the 65-byte
`r || s || v` form and `Signature.recover(hash)` the signer's address.

`batch_sign_message` signs one message with several keys and
`batch_sign_messages` several messages with one key. `verify_signatures`
returns one boolean for all pairs, `batch_verify_signatures` one per pair; both
raise `ValueError` when the number of messages and signatures differ. The
signing functions print the message, wallet and signature to standard output.

## Checking a TLS Notary presentation

```python
from ethproofkit.tlsn import verify_tlsn_presentation

result = verify_tlsn_presentation(document_text)
if result.verified:
    print("presentation accepted")
else:
    print("rejected:", result.error)
```

The document must be a JSON object with a `presentationJson` object holding
`version`, `data` and `meta` (with `notaryUrl` and `websocketProxyUrl`).
The result is a `VerificationResult`; `verified` is true when the document has
that shape and `data` is valid hex, otherwise `error` says why.

## Fetching proofs from a node

```python
from ethproofkit.rpc import EthProvider, build_proof_input
from ethproofkit.guest import run_proof

with EthProvider("http://localhost:8545") as provider:
    block = provider.get_block(22406754)
    proof = provider.get_proof(address, [bytes(32)], 22406754)

state_root = bytes.fromhex(block["stateRoot"][2:])
output = run_proof(build_proof_input(proof, state_root, address))
```

`EthProvider` speaks JSON-RPC over HTTP (`get_block_number`, `get_block`,
`get_proof`) and raises `RpcError` on transport or node errors.
`setup_eth_provider(NodeKind)` picks a node from the environment:

| Variable | Used for |
| --- | --- |
| `ANVIL_URL` | `NodeKind.ANVIL`, default `http://localhost:8545` |
| `ALCHEMY_BASE_URL`, `ALCHEMY_API_KEY` | `NodeKind.ALCHEMY`; the URL is the base URL followed by `/` and the key |
| `ETH_ARCHIVE_URL` | fallback when the preferred node does not answer |

If the preferred node does not answer and `ETH_ARCHIVE_URL` is not set,
`RpcError` is raised.

## Command-line tools

```console
ethproofkit-verify-tlsn [PATH]
```

Reads a presentation JSON file (default `../test_data/valid_presentation.json`)
and prints the verification status and any error. Exits with 1 only when the
file cannot be read.

```console
ALCHEMY_BASE_URL=https://node.example.com/v2 ALCHEMY_API_KEY=placeholder \
ETH_ARCHIVE_URL=https://archive.example.com \
ethproofkit-account-proof 0x00000000000000000000000000000000000000aa --block 22406754 --node alchemy
```

Connects to a node (`--node` is `anvil`, `alchemy` or `archive`; default
`alchemy`), fetches the block's state root and the account proof for slot
zero at `--block` (default 22406754), verifies the proof locally and prints
whether the account exists and its nonce, balance, storage root and code hash.
Exits with 1 on node or input errors.

## What this package does not do

- The proof check runs in-process; no succinct or zero-knowledge proof of the
  check is produced, and there are no receipts to store or convert.
- Storage slot values are fetched but not verified by `run_proof` or the
  account-proof command.
- TLS Notary presentations are only checked for shape and hex payload; the
  notary's attestation and the revealed HTTP transcript are not verified, so
  `server_name`, request and response fields of `VerificationResult` stay
  empty.