"""
Deterministic encoding helpers used for state commitments and signed calls.

JSON here is canonical: sorted keys, no whitespace, UTF-8, no floats. Two
equal values always encode to the same bytes.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


CANONICAL_ENCODING_VERSION = 1

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def _check_encodable(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError("surrogate code points are not allowed in canonical encoding")
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _check_encodable(k)
            _check_encodable(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _check_encodable(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing/signing.

    Rules:
    - UTF-8
    - sort_keys=True
    - separators=(',', ':') (no whitespace)
    - allow_nan=False
    - floats rejected (ints are arbitrary precision, floats are not)
    """
    _check_encodable(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    Domain separation prefix ``djed:<label>:v<version>\\x00``.

    ASCII-only and NUL-terminated so concatenation with a payload is unambiguous.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    if not label.isascii():
        raise ValueError("label must be ASCII")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return f"djed:{label}:v{version}".encode("ascii") + b"\x00"


def _strip_hex(hex_str: str, *, nbytes: int, name: str) -> str:
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    s = hex_str.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    if len(s) != 2 * nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes (hex length {2 * nbytes})")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return s


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """Canonicalize a fixed-size hex string (lowercase, 0x-prefixed)."""
    return "0x" + _strip_hex(hex_str, nbytes=nbytes, name=name).lower()


def hex_to_bytes_allow_0x(hex_str: str, *, nbytes: int, name: str) -> bytes:
    """Decode a fixed-size hex string, with or without the 0x prefix."""
    return bytes.fromhex(_strip_hex(hex_str, nbytes=nbytes, name=name))
