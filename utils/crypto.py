"""Field-level encryption and password digests.

Every sensitive column is encrypted on its own with AES (ECB mode, PKCS#7
padding) under a key derived from the owner's password, then base64-encoded.
Encryption is deterministic, so an encrypted value can be used directly as a
lookup key (the transactions table is filtered on the encrypted username).
"""
import base64
import binascii
import hashlib
import hmac
import logging

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from utils.constants import AES_KEY_SIZES, DECRYPT_FALLBACK, FIELD_KEY_SIZE

logger = logging.getLogger(__name__)

_BLOCK_BITS = algorithms.AES.block_size


class DecryptionError(Exception):
    """A stored field could not be decrypted with the given key."""


def derive_key(password: str, key_size: int = FIELD_KEY_SIZE) -> bytes:
    """SHA-256 of the password truncated to key_size bytes (16, 24 or 32)."""
    if key_size not in AES_KEY_SIZES:
        raise ValueError("Invalid AES key size. Must be 16, 24, or 32 bytes.")
    return hashlib.sha256(password.encode("utf-8")).digest()[:key_size]


def encrypt_field(plaintext: str, key: bytes) -> str:
    padder = padding.PKCS7(_BLOCK_BITS).padder()
    data = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    encrypted = encryptor.update(data) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")


def try_decrypt_field(ciphertext: str, key: bytes) -> str:
    """Decrypt one field, raising DecryptionError on any failure."""
    try:
        raw = base64.b64decode(ciphertext, validate=True)
        decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
        data = decryptor.update(raw) + decryptor.finalize()
        unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
        plain = unpadder.update(data) + unpadder.finalize()
        return plain.decode("utf-8")
    except (binascii.Error, ValueError, TypeError) as exc:
        raise DecryptionError(str(exc)) from exc


def decrypt_field(ciphertext: str, key: bytes) -> str:
    """Decrypt one field; failures degrade to "0.0" instead of raising."""
    try:
        return try_decrypt_field(ciphertext, key)
    except DecryptionError as exc:
        logger.debug("Field decryption failed, using fallback: %s", exc)
        return DECRYPT_FALLBACK


def password_salt(username: str, password: str) -> str:
    """MAC key material for a login: username followed by len(username + password)."""
    return username + str(len(username) + len(password))


def hmac_password_digest(salted_key_material: str, password: str) -> str:
    mac = hmac.new(
        salted_key_material.encode("utf-8"),
        password.encode("utf-8"),
        hashlib.sha256,
    )
    return base64.b64encode(mac.digest()).decode("ascii")


class FieldCipher:
    """Binds the key derived from one user's password."""

    def __init__(self, password: str, key_size: int = FIELD_KEY_SIZE):
        self._key = derive_key(password, key_size)

    def encrypt(self, plaintext: str) -> str:
        return encrypt_field(plaintext, self._key)

    def decrypt(self, ciphertext: str) -> str:
        return decrypt_field(ciphertext, self._key)

    def try_decrypt(self, ciphertext: str) -> str:
        return try_decrypt_field(ciphertext, self._key)
