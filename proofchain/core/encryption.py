"""Encryption of sensitive record fields (ID numbers, licence numbers, ...).

Envelope format is ``<iv hex>:<ciphertext hex>`` using AES-256-CBC with PKCS7
padding. The AES key is the SHA-256 of the configured key string, so any
non-empty passphrase works as a key.
"""

from __future__ import annotations

import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from proofchain.core.config import get_settings

_IV_BYTES = 16
_BLOCK_BITS = 128
_ENVELOPE_DELIMITER = ":"


class EncryptionError(Exception):
    """Raised when encryption or decryption fails."""


class DecryptionError(EncryptionError):
    """Raised when an envelope cannot be decrypted with the given key."""


def derive_key(key: str) -> bytes:
    """Derive the 256-bit AES key from a key string."""
    return hashlib.sha256(key.encode("utf-8")).digest()


class SensitiveValueEncryptor:
    """Encrypt/decrypt individual strings with a single derived key."""

    def __init__(self, key: str) -> None:
        if not key:
            raise EncryptionError("encryption key must not be empty")
        self._key = derive_key(key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt ``plaintext`` under a fresh random IV."""
        iv = os.urandom(_IV_BYTES)
        padder = padding.PKCS7(_BLOCK_BITS).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return f"{iv.hex()}{_ENVELOPE_DELIMITER}{ciphertext.hex()}"

    def decrypt(self, envelope: str) -> str:
        """Decrypt an envelope produced by :meth:`encrypt`.

        Raises
        ------
        DecryptionError
            For a wrong key or any structurally invalid envelope.
        """
        try:
            iv_hex, ciphertext_hex = envelope.split(_ENVELOPE_DELIMITER, 1)
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)
            if len(iv) != _IV_BYTES:
                raise ValueError(f"IV must be {_IV_BYTES} bytes, got {len(iv)}")
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except Exception as exc:
            raise DecryptionError("Decryption failed: invalid key or corrupted data") from exc


def _resolve_key(key: str | None) -> str:
    return key if key else get_settings().encryption_key


def encrypt_sensitive(plaintext: str, key: str | None = None) -> str:
    """Encrypt ``plaintext``; ``key`` defaults to the configured encryption key."""
    return SensitiveValueEncryptor(_resolve_key(key)).encrypt(plaintext)


def decrypt_sensitive(envelope: str, key: str | None = None) -> str:
    """Decrypt ``envelope``; ``key`` defaults to the configured encryption key."""
    return SensitiveValueEncryptor(_resolve_key(key)).decrypt(envelope)
