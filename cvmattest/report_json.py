"""Building the attestation report JSON and dumping a token's claims."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from .b64 import base64url_to_binary, binary_to_base64


@dataclass(frozen=True)
class PcrQuote:
    """A TPM quote over a PCR selection and its signature."""

    quote: bytes
    signature: bytes


@dataclass(frozen=True)
class PcrValue:
    """The digest held in one PCR."""

    index: int
    digest: bytes


def get_json(
    aik_cert: bytes,
    aik_pub: bytes,
    pcr_quote: PcrQuote,
    pcr_hash: bytes,
    pcr_values: Iterable[PcrValue],
    tcg_log: bytes,
    is_windows: bool = False,
) -> str:
    """Return the compact JSON report with every binary field base64 encoded."""
    document = {
        "is_windows": is_windows,
        "aik_cert": binary_to_base64(aik_cert),
        "aik_pub": binary_to_base64(aik_pub),
        "pcr_quote": binary_to_base64(pcr_quote.quote),
        "pcr_signature": binary_to_base64(pcr_quote.signature),
        "pcr_hash": binary_to_base64(pcr_hash),
        "tcg_log": binary_to_base64(tcg_log),
        "pcr_values": [
            {"index": pcr.index, "value": binary_to_base64(pcr.digest)}
            for pcr in pcr_values
        ],
    }
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


def _events(value: Any) -> Iterator[str]:
    if value is None:
        yield "\n"
    elif isinstance(value, bool):
        yield f"{'true' if value else 'false'}\n"
    elif isinstance(value, int):
        yield f"{value}\n"
    elif isinstance(value, float):
        yield f"{value:g}\n"
    elif isinstance(value, str):
        yield f"{value}\n"
    elif isinstance(value, dict):
        for key, item in value.items():
            yield f"{key} : "
            yield from _events(item)
    elif isinstance(value, list):
        yield "StartArray()\n"
        for item in value:
            yield from _events(item)
        yield f"EndArray({len(value)})\n"


def parse_json(response: str) -> Any:
    """Print the claims of a JWT payload event by event and return them parsed."""
    parts = response.split(".")
    if len(parts) < 2:
        raise ValueError("response is not a dot-separated token")
    payload = base64url_to_binary(parts[1]).decode("utf-8")
    claims = json.loads(payload)
    print("\nParsing Response\n")
    print("".join(_events(claims)), end="")
    return claims