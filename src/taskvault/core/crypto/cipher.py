"""Symmetric encryption of individual string fields.

Values are written as ``hex(iv):hex(ciphertext):hex(tag)`` using AES-256-GCM
with a fresh 16-byte IV per call. The older two-part ``hex(iv):hex(ciphertext)``
AES-256-CBC form is still accepted by ``decrypt`` so existing rows stay
readable, but it is never produced.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_SIZE = 32
IV_SIZE = 16
TAG_SIZE = 16
SEPARATOR = ":"


class CipherError(Exception):
    """Base class for field cipher failures. Never shown to users."""


class CipherFormatError(CipherError):
    """Raised when an encoded value is not a recognised ``iv:ciphertext[:tag]`` string."""


class DecryptionError(CipherError):
    """Raised when a well-formed value cannot be decrypted (tampered, wrong key, corrupt)."""


class FieldCipher:
    """Encrypts and decrypts single string fields with one process-wide key."""

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise ValueError(f"Field cipher key must be exactly {KEY_SIZE} bytes, got {len(key)}")
        self._key = key
        self._aead = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_SIZE)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return SEPARATOR.join((iv.hex(), ciphertext.hex(), tag.hex()))

    def decrypt(self, encoded: str) -> str:
        parts = _split(encoded)
        if len(parts) == 3:
            iv, ciphertext, tag = parts
            try:
                raw = self._aead.decrypt(iv, ciphertext + tag, None)
            except InvalidTag as e:
                raise DecryptionError("Authentication tag mismatch") from e
        else:
            iv, ciphertext = parts
            raw = self._decrypt_legacy_cbc(iv, ciphertext)

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted value is not valid UTF-8") from e

    def _decrypt_legacy_cbc(self, iv: bytes, ciphertext: bytes) -> bytes:
        if not ciphertext or len(ciphertext) % (algorithms.AES.block_size // 8):
            raise DecryptionError("Ciphertext is not a whole number of blocks")
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Invalid padding") from e


def _split(encoded: str) -> list[bytes]:
    """Split and hex-decode an encoded value, failing closed on any irregularity."""
    segments = encoded.split(SEPARATOR)
    if len(segments) not in (2, 3):
        raise CipherFormatError("Invalid encrypted text format")

    try:
        parts = [bytes.fromhex(segment) for segment in segments]
    except ValueError as e:
        raise CipherFormatError("Invalid encrypted text format") from e

    # bytes.fromhex tolerates whitespace between byte pairs; the encoding does not
    if any(len(segment) != len(part) * 2 for segment, part in zip(segments, parts, strict=True)):
        raise CipherFormatError("Invalid encrypted text format")
    if len(parts[0]) != IV_SIZE:
        raise CipherFormatError("Invalid IV length")
    if len(parts) == 3 and len(parts[2]) != TAG_SIZE:
        raise CipherFormatError("Invalid authentication tag length")
    return parts
