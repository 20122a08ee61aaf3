"""Tests for the field cipher."""

import os

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from taskvault.core.crypto.cipher import CipherError, CipherFormatError, DecryptionError, FieldCipher

OTHER_KEY = b"fedcba9876543210fedcba9876543210"


def legacy_cbc_encrypt(key: bytes, plaintext: str) -> str:
    """Produce a value in the two-part AES-256-CBC encoding used before AES-GCM."""
    iv = os.urandom(16)
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def flip_hex_digit(value: str, index: int) -> str:
    replacement = "0" if value[index] != "0" else "1"
    return value[:index] + replacement + value[index + 1 :]


class TestKey:
    def test_key_must_be_32_bytes(self):
        with pytest.raises(ValueError, match="32 bytes"):
            FieldCipher(b"too-short")
        with pytest.raises(ValueError, match="32 bytes"):
            FieldCipher(b"x" * 33)


class TestRoundTrip:
    """Tests for encrypt/decrypt round trips."""

    @pytest.mark.parametrize(
        "plaintext",
        ["secret notes", "", "multi\nline\ttext", "ünïcödé ✓ 日本語", "a:b:c", "x" * 4999],
    )
    def test_decrypt_returns_original(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_same_plaintext_encrypts_differently(self, cipher):
        """Each call uses a fresh IV."""
        first = cipher.encrypt("same text")
        second = cipher.encrypt("same text")
        assert first != second
        assert first.split(":")[0] != second.split(":")[0]

    def test_encoding_is_iv_ciphertext_tag_hex(self, cipher):
        iv, ciphertext, tag = cipher.encrypt("hello").split(":")
        assert len(bytes.fromhex(iv)) == 16
        assert len(bytes.fromhex(tag)) == 16
        assert len(bytes.fromhex(ciphertext)) == len(b"hello")

    def test_ciphertext_does_not_contain_plaintext(self, cipher):
        encoded = cipher.encrypt("very secret notes")
        assert "very secret notes" not in encoded
        assert b"very secret notes".hex() not in encoded


class TestFormatErrors:
    """Malformed input must fail with CipherFormatError, never return garbage."""

    @pytest.mark.parametrize(
        "encoded",
        [
            "",
            "plain text",
            "00112233445566778899aabbccddeeff",
            "a:b:c:d",
            "zz:zz",
            "00112233445566778899aabbccddeeff:xyz",
            "0011:aabbcc",  # IV too short
            "00112233445566778899aabbccddeeff:aabb:0011",  # tag too short
            "00112233445566778899aabbccddeeff:aab",  # odd length
            "00 11 22 33 44 55 66 77 88 99 aa bb cc dd ee ff:aabb",  # whitespace inside hex
        ],
    )
    def test_malformed_value_rejected(self, cipher, encoded):
        with pytest.raises(CipherFormatError):
            cipher.decrypt(encoded)

    def test_format_error_is_not_decryption_error(self, cipher):
        with pytest.raises(CipherFormatError) as exc_info:
            cipher.decrypt("nope")
        assert not isinstance(exc_info.value, DecryptionError)
        assert isinstance(exc_info.value, CipherError)


class TestTamperDetection:
    def test_modified_ciphertext_rejected(self, cipher):
        iv, ciphertext, tag = cipher.encrypt("secret notes").split(":")
        tampered = f"{iv}:{flip_hex_digit(ciphertext, 0)}:{tag}"
        with pytest.raises(DecryptionError):
            cipher.decrypt(tampered)

    def test_modified_tag_rejected(self, cipher):
        iv, ciphertext, tag = cipher.encrypt("secret notes").split(":")
        with pytest.raises(DecryptionError):
            cipher.decrypt(f"{iv}:{ciphertext}:{flip_hex_digit(tag, 5)}")

    def test_modified_iv_rejected(self, cipher):
        iv, ciphertext, tag = cipher.encrypt("secret notes").split(":")
        with pytest.raises(DecryptionError):
            cipher.decrypt(f"{flip_hex_digit(iv, 3)}:{ciphertext}:{tag}")

    def test_wrong_key_rejected(self, cipher):
        encoded = cipher.encrypt("secret notes")
        with pytest.raises(DecryptionError):
            FieldCipher(OTHER_KEY).decrypt(encoded)


class TestLegacyCbc:
    """Values written in the older two-part CBC encoding stay readable."""

    def test_legacy_value_decrypts(self, cipher):
        encoded = legacy_cbc_encrypt(b"0123456789abcdef0123456789abcdef", "written by the old scheme")
        assert cipher.decrypt(encoded) == "written by the old scheme"

    def test_encrypt_never_writes_legacy_format(self, cipher):
        assert len(cipher.encrypt("anything").split(":")) == 3

    def test_partial_block_rejected(self, cipher):
        iv = "00" * 16
        with pytest.raises(DecryptionError):
            cipher.decrypt(f"{iv}:aabbcc")

    def test_empty_legacy_ciphertext_rejected(self, cipher):
        with pytest.raises(DecryptionError):
            cipher.decrypt("00" * 16 + ":")
