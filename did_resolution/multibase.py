"""Multibase decoding for ledger key material."""

import base64
import binascii
from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

import base58


class MultibaseDecoder(ABC):
    """Decoding details for one multibase encoding."""

    name: ClassVar[str]
    character: ClassVar[str]

    @abstractmethod
    def decode(self, value: str) -> bytes:
        """Decode a string without its prefix character."""


def _pad(value: str) -> str:
    return value + "=" * (-len(value) % 4)


class Base58BtcDecoder(MultibaseDecoder):
    """Base58BTC."""

    name = "base58btc"
    character = "z"

    def decode(self, value: str) -> bytes:
        """Decode a base58btc string."""
        return base58.b58decode(value)


class Base64UrlDecoder(MultibaseDecoder):
    """Base64URL, unpadded."""

    name = "base64url"
    character = "u"

    def decode(self, value: str) -> bytes:
        """Decode a base64url string."""
        return base64.urlsafe_b64decode(_pad(value))


class Base64Decoder(MultibaseDecoder):
    """Base64, unpadded."""

    name = "base64"
    character = "m"

    def decode(self, value: str) -> bytes:
        """Decode a base64 string."""
        return base64.b64decode(_pad(value), validate=True)


class Base16Decoder(MultibaseDecoder):
    """Lower case hexadecimal."""

    name = "base16"
    character = "f"

    def decode(self, value: str) -> bytes:
        """Decode a hexadecimal string."""
        return bytes.fromhex(value)


class Encoding(Enum):
    """Encodings accepted in publicKeyMultibase."""

    base58btc = Base58BtcDecoder()
    base64url = Base64UrlDecoder()
    base64 = Base64Decoder()
    base16 = Base16Decoder()

    @classmethod
    def from_character(cls, character: str) -> MultibaseDecoder:
        """Get encoding from its prefix character."""
        for encoding in cls:
            if encoding.value.character == character:
                return encoding.value
        raise ValueError(f"Unsupported encoding: {character}")


def decode(value: str) -> bytes:
    """Decode a multibase encoded string.

    Args:
        value: The string to decode, prefix character included

    Returns:
        The decoded byte string

    Raises:
        ValueError: if the prefix is unknown or the value does not decode
    """
    if not value:
        raise ValueError("Empty multibase value")

    decoder = Encoding.from_character(value[0])
    try:
        return decoder.decode(value[1:])
    except binascii.Error as err:
        raise ValueError(f"Invalid {decoder.name} value") from err
