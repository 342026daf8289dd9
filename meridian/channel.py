"""
Meridian Confidential Channel

Authenticated public-key encryption of KYC/PII payloads exchanged between
compliance counterparties, plus content hashing for anchoring evidence.

Uses Curve25519-XSalsa20-Poly1305 (NaCl box). Every call to ``encrypt``
draws a fresh 24-byte nonce, so identical plaintexts never produce the
same ciphertext. Decryption authenticates before releasing any output.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import nacl.utils
from nacl.exceptions import CryptoError
from nacl.public import Box, PrivateKey, PublicKey

from .errors import DecryptionFailed, InvalidConfiguration
from .logging_config import audit_log
from .util import b64d, b64e

logger = logging.getLogger(__name__)

NONCE_LENGTH = Box.NONCE_SIZE
KEY_LENGTH = PublicKey.SIZE
HASH_LENGTH = 32


@dataclass
class KeyPair:
    """Curve25519 key pair."""
    public_key: bytes
    secret_key: bytes

    def to_dict(self) -> Dict[str, str]:
        return {"public_key": b64e(self.public_key), "secret_key": b64e(self.secret_key)}


@dataclass
class EncryptedPayload:
    """Ciphertext, nonce and the sender's public key. Never persisted."""
    ciphertext: bytes
    nonce: bytes
    sender_public_key: bytes

    def content_hash(self) -> bytes:
        """SHA-256 over nonce, sender key and ciphertext; the value that gets anchored."""
        return hashlib.sha256(self.nonce + self.sender_public_key + self.ciphertext).digest()

    def to_dict(self) -> Dict[str, str]:
        return {
            "ciphertext": b64e(self.ciphertext),
            "nonce": b64e(self.nonce),
            "sender_public_key": b64e(self.sender_public_key),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedPayload":
        try:
            return cls(
                ciphertext=b64d(data["ciphertext"]),
                nonce=b64d(data["nonce"]),
                sender_public_key=b64d(data["sender_public_key"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Malformed encrypted payload: {e}")


def generate_key_pair() -> KeyPair:
    """Generate a fresh Curve25519 key pair."""
    secret = PrivateKey.generate()
    return KeyPair(public_key=bytes(secret.public_key), secret_key=bytes(secret))


def sha256(data: Union[bytes, str]) -> bytes:
    """32-byte SHA-256 digest."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).digest()


class ConfidentialChannel:
    """
    One party's end of the confidential channel.

    Args:
        secret_key: 32-byte Curve25519 secret key. A fresh key is generated
            when omitted. The same secret key always yields the same
            public key.
    """

    def __init__(self, secret_key: Optional[bytes] = None):
        if secret_key is None:
            self._secret = PrivateKey.generate()
        else:
            if not isinstance(secret_key, (bytes, bytearray)) or len(secret_key) != KEY_LENGTH:
                raise InvalidConfiguration(f"secret_key must be {KEY_LENGTH} bytes")
            self._secret = PrivateKey(bytes(secret_key))

    @property
    def public_key(self) -> bytes:
        return bytes(self._secret.public_key)

    @property
    def secret_key(self) -> bytes:
        return bytes(self._secret)

    @property
    def key_pair(self) -> KeyPair:
        return KeyPair(public_key=self.public_key, secret_key=self.secret_key)

    def encrypt(self, plaintext: bytes, recipient_public_key: bytes) -> EncryptedPayload:
        """Encrypt ``plaintext`` for ``recipient_public_key``, authenticated as this sender."""
        try:
            box = Box(self._secret, PublicKey(bytes(recipient_public_key)))
        except (CryptoError, TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Invalid recipient public key: {e}")

        nonce = nacl.utils.random(NONCE_LENGTH)
        encrypted = box.encrypt(bytes(plaintext), nonce)
        return EncryptedPayload(
            ciphertext=encrypted.ciphertext,
            nonce=nonce,
            sender_public_key=self.public_key,
        )

    def decrypt(self, payload: EncryptedPayload) -> bytes:
        """
        Authenticate and decrypt ``payload``.

        Raises:
            DecryptionFailed: Tampered ciphertext, wrong sender key, wrong
                recipient key, or malformed input. No partial output.
        """
        try:
            if len(payload.nonce) != NONCE_LENGTH:
                raise ValueError(f"nonce must be {NONCE_LENGTH} bytes")
            box = Box(self._secret, PublicKey(bytes(payload.sender_public_key)))
            return box.decrypt(bytes(payload.ciphertext), bytes(payload.nonce))
        except (CryptoError, TypeError, ValueError) as e:
            audit_log.security_event("decryption_failed", sender=b64e(bytes(payload.sender_public_key or b"")))
            logger.debug("Decryption failed: %s", e)
            raise DecryptionFailed("authenticated decryption failed")

    @staticmethod
    def hash(data: Union[bytes, str]) -> bytes:
        return sha256(data)

    def encrypt_string(self, text: str, recipient_public_key: bytes) -> EncryptedPayload:
        return self.encrypt(text.encode("utf-8"), recipient_public_key)

    def decrypt_string(self, payload: EncryptedPayload) -> str:
        plaintext = self.decrypt(payload)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionFailed("plaintext is not valid UTF-8")

    @staticmethod
    def hash_string(text: str) -> str:
        """Hex SHA-256 of a UTF-8 string."""
        return sha256(text).hex()
