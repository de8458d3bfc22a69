"""Parsing and checking of TLS Notary presentation documents."""

from __future__ import annotations

import argparse
import json
import string
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

DEFAULT_PRESENTATION_PATH = "../test_data/valid_presentation.json"

_HEX_DIGITS = frozenset(string.hexdigits)


def _require_object(data, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"invalid type: expected {what} to be an object")
    return data


def _require_str(data: dict, name: str) -> str:
    if name not in data:
        raise ValueError(f"missing field `{name}`")
    value = data[name]
    if not isinstance(value, str):
        raise ValueError(f"invalid type for field `{name}`: expected a string")
    return value


def _require_field(data: dict, name: str):
    if name not in data:
        raise ValueError(f"missing field `{name}`")
    return data[name]


@dataclass(frozen=True)
class Meta:
    """Endpoints used when the presentation was produced."""

    notary_url: str
    websocket_proxy_url: str

    @classmethod
    def from_dict(cls, data) -> "Meta":
        data = _require_object(data, "meta")
        return cls(
            notary_url=_require_str(data, "notaryUrl"),
            websocket_proxy_url=_require_str(data, "websocketProxyUrl"),
        )

    def to_dict(self) -> dict:
        return {"notaryUrl": self.notary_url, "websocketProxyUrl": self.websocket_proxy_url}


@dataclass(frozen=True)
class PresentationJson:
    """A presentation: format version, hex payload and metadata."""

    version: str
    data: str
    meta: Meta

    @classmethod
    def from_dict(cls, data) -> "PresentationJson":
        data = _require_object(data, "presentationJson")
        return cls(
            version=_require_str(data, "version"),
            data=_require_str(data, "data"),
            meta=Meta.from_dict(_require_field(data, "meta")),
        )

    def to_dict(self) -> dict:
        return {"version": self.version, "data": self.data, "meta": self.meta.to_dict()}


@dataclass(frozen=True)
class PresentationWrapper:
    """Top-level document holding a presentation."""

    presentation_json: PresentationJson

    @classmethod
    def from_dict(cls, data) -> "PresentationWrapper":
        data = _require_object(data, "document")
        return cls(PresentationJson.from_dict(_require_field(data, "presentationJson")))

    def to_dict(self) -> dict:
        return {"presentationJson": self.presentation_json.to_dict()}


@dataclass
class VerificationResult:
    """Outcome of verifying a presentation."""

    verified: bool
    server_name: Optional[str] = None
    request_method: Optional[str] = None
    request_uri: Optional[str] = None
    response_status: Optional[int] = None
    response_body: Optional[str] = None
    headers: List[Tuple[str, str]] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class HttpMessage:
    """An HTTP request or response revealed by a presentation."""

    method: Optional[str] = None
    uri: Optional[str] = None
    status: Optional[int] = None
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""


def _decode_hex(text: str) -> bytes:
    if len(text) % 2:
        raise ValueError("Odd number of digits")
    for position, char in enumerate(text):
        if char not in _HEX_DIGITS:
            raise ValueError(f"Invalid character {char!r} at position {position}")
    return bytes.fromhex(text)


def verify_tlsn_presentation(presentation_json: str) -> VerificationResult:
    """Parse a presentation document and check that its payload is valid hex."""
    try:
        wrapper = PresentationWrapper.from_dict(json.loads(presentation_json))
    except ValueError as exc:
        return VerificationResult(verified=False, error=f"Failed to parse JSON: {exc}")

    try:
        _decode_hex(wrapper.presentation_json.data)
    except ValueError as exc:
        return VerificationResult(verified=False, error=f"Failed to decode hex data: {exc}")

    return VerificationResult(verified=True)


def main(argv=None) -> int:
    """Verify a presentation file and print the result."""
    parser = argparse.ArgumentParser(description="Verify a TLS Notary presentation file.")
    parser.add_argument("path", nargs="?", default=DEFAULT_PRESENTATION_PATH)
    args = parser.parse_args(argv)

    try:
        text = Path(args.path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Failed to read presentation file: {exc}", file=sys.stderr)
        return 1

    result = verify_tlsn_presentation(text)
    print("=== TLS NOTARY VERIFICATION RESULT ===")
    print(f"Verification Status: {str(result.verified).lower()}")
    if result.error is not None:
        print(f"Error: {result.error}")
    return 0