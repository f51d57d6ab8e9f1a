from __future__ import annotations

import pytest

from djed_reserve.state.canonical import (
    canonical_hex_fixed_allow_0x,
    canonical_json_bytes,
    domain_sep_bytes,
    hex_to_bytes_allow_0x,
    sha256_hex,
)
from djed_reserve.state.nonces import NonceTable

PK = "0x" + "ab" * 48


def test_canonical_json_sorted_and_compact() -> None:
    assert canonical_json_bytes({"b": 1, "a": [True, None, "x"]}) == b'{"a":[true,null,"x"],"b":1}'


def test_canonical_json_keeps_big_ints() -> None:
    assert canonical_json_bytes(2**256 - 1) == str(2**256 - 1).encode()


@pytest.mark.parametrize("value", [1.5, {"a": 0.0}, [1, 2.0], {1: "x"}, "\ud800"])
def test_canonical_json_rejects(value) -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes(value)


def test_canonical_json_utf8() -> None:
    assert canonical_json_bytes("Ω") == '"Ω"'.encode("utf-8")


def test_sha256_hex() -> None:
    assert sha256_hex(b"") == "0xe3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_domain_sep() -> None:
    assert domain_sep_bytes("reserve_state") == b"djed:reserve_state:v1\x00"
    assert domain_sep_bytes("x", version=3) == b"djed:x:v3\x00"


@pytest.mark.parametrize("label, version, exc", [
    ("", 1, TypeError),
    ("a\x00b", 1, ValueError),
    ("Ω", 1, ValueError),
    ("a", 0, ValueError),
    ("a", True, ValueError),
])
def test_domain_sep_rejects(label, version, exc) -> None:
    with pytest.raises(exc):
        domain_sep_bytes(label, version=version)


def test_hex_helpers() -> None:
    assert canonical_hex_fixed_allow_0x("AB" * 2, nbytes=2, name="x") == "0xabab"
    assert hex_to_bytes_allow_0x("0xabab", nbytes=2, name="x") == b"\xab\xab"
    with pytest.raises(ValueError, match="2 bytes"):
        hex_to_bytes_allow_0x("ab", nbytes=2, name="x")
    with pytest.raises(ValueError, match="valid hex"):
        hex_to_bytes_allow_0x("zzzz", nbytes=2, name="x")
    with pytest.raises(TypeError):
        hex_to_bytes_allow_0x(None, nbytes=2, name="x")  # type: ignore[arg-type]


def test_nonce_table_sequential() -> None:
    t = NonceTable()
    assert t.get_last(PK) == 0
    assert t.next_expected(PK) == 1
    t.set_last(PK, 1)
    assert t.next_expected(PK.upper().replace("0X", "0x")) == 2
    assert t.get_all() == {PK: 1}


@pytest.mark.parametrize("bad", [-1, True, 2**32, "1"])
def test_nonce_table_rejects_bad_values(bad) -> None:
    with pytest.raises(TypeError):
        NonceTable().set_last(PK, bad)
