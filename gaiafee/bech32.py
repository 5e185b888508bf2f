"""Bech32 encoding and conversion of addresses between prefixes."""

from __future__ import annotations

from collections.abc import Iterable

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_LENGTH = 1023


class Bech32Error(ValueError):
    """Raised when a bech32 string cannot be encoded or decoded."""


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    result = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error(f"invalid data range: {value}")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise Bech32Error("invalid incomplete group")
    return result


def bech32_encode(hrp: str, data: Iterable[int]) -> str:
    """Encode 5-bit values under a human-readable part, with checksum."""
    hrp = hrp.lower()
    values = list(data)
    for value in values:
        if not 0 <= value < len(CHARSET):
            raise Bech32Error(f"invalid data byte: {value}")
    combined = values + _create_checksum(hrp, values)
    return hrp + "1" + "".join(CHARSET[v] for v in combined)


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode a bech32 string into its human-readable part and 5-bit values."""
    if len(bech) > _MAX_LENGTH or len(bech) < 8:
        raise Bech32Error(f"invalid bech32 string length {len(bech)}")
    for char in bech:
        if not 33 <= ord(char) <= 126:
            raise Bech32Error(f"invalid character in string: '{char}'")
    lower = bech.lower()
    if bech != lower and bech != bech.upper():
        raise Bech32Error("string not all lowercase or all uppercase")
    bech = lower
    one = bech.rfind("1")
    if one < 1 or one + 7 > len(bech):
        raise Bech32Error(f"invalid separator index {one}")
    hrp, data_part = bech[:one], bech[one + 1 :]
    decoded = []
    for char in data_part:
        index = CHARSET.find(char)
        if index < 0:
            raise Bech32Error(
                "failed converting data to bytes: "
                f"invalid character not part of charset: {ord(char)}"
            )
        decoded.append(index)
    if _polymod(_hrp_expand(hrp) + decoded) != 1:
        payload = decoded[:-6]
        expected = "".join(CHARSET[v] for v in _create_checksum(hrp, payload))
        actual = data_part[-6:]
        raise Bech32Error(f"invalid checksum (expected {expected} got {actual})")
    return hrp, decoded[:-6]


def decode_and_convert(address: str) -> tuple[str, bytes]:
    """Decode a bech32 address into its prefix and raw bytes."""
    try:
        hrp, data = bech32_decode(address)
        converted = _convert_bits(data, 5, 8, False)
    except Bech32Error as exc:
        raise Bech32Error(f"decoding bech32 failed: {exc}") from exc
    return hrp, bytes(converted)


def convert_and_encode(prefix: str, data: bytes) -> str:
    """Encode raw bytes as a bech32 string with the given prefix."""
    try:
        converted = _convert_bits(data, 8, 5, True)
        return bech32_encode(prefix, converted)
    except Bech32Error as exc:
        raise Bech32Error(f"encoding bech32 failed: {exc}") from exc


def convert_bech32_prefix(address: str, prefix: str) -> str:
    """Re-encode a bech32 address under another prefix."""
    try:
        _, data = decode_and_convert(address)
    except Bech32Error as exc:
        raise Bech32Error(f"cannot decode {address} address: {exc}") from exc
    try:
        return convert_and_encode(prefix, data)
    except Bech32Error as exc:
        raise Bech32Error(f"cannot convert {address} address: {exc}") from exc