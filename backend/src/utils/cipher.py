"""Client-side symmetric encryption of sensitive report fields.

Each call to :meth:`SymmetricCipher.encrypt` generates its own AES-256-GCM key
and nonce. The key is only a local of that call: it is not returned, logged,
stored or transmitted, so the resulting envelope cannot be decrypted by anyone,
including the backend that stores it. Key bytes are not scrubbed from memory;
they become unreachable when the call returns. There is no ``decrypt``.
"""

import base64
import json
import os

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from src.exceptions import CryptoUnavailableError, EncodingError

KEY_BITS = 256
NONCE_BYTES = 12


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


class SymmetricCipher:
    """Encrypts text into a transport-safe JSON envelope with an ephemeral key."""

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a plaintext string.

        Args:
            plaintext: Text to encrypt

        Returns:
            Compact JSON string ``{"iv": <base64 nonce>, "data": <base64 ciphertext>}``

        Raises:
            EncodingError: If plaintext is not a string or is not UTF-8 encodable
            CryptoUnavailableError: If AES-GCM or the randomness source is unavailable
        """
        if not isinstance(plaintext, str):
            raise EncodingError(
                message="Plaintext must be a string",
                details={"type": type(plaintext).__name__},
            )
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError(message=f"Plaintext is not UTF-8 encodable: {e.reason}")

        try:
            key = AESGCM.generate_key(bit_length=KEY_BITS)
            nonce = os.urandom(NONCE_BYTES)
            ciphertext = AESGCM(key).encrypt(nonce, data, None)
        except (UnsupportedAlgorithm, NotImplementedError, OSError) as e:
            raise CryptoUnavailableError(
                message=f"Authenticated encryption unavailable: {e}",
                details={"error_type": type(e).__name__},
            )

        return json.dumps({"iv": _b64(nonce), "data": _b64(ciphertext)}, separators=(",", ":"))

    def self_test(self) -> bool:
        """Return True if an encryption round can be performed in this environment."""
        try:
            self.encrypt("self-test")
        except CryptoUnavailableError:
            return False
        return True


def parse_envelope(envelope: str) -> tuple[bytes, bytes]:
    """
    Decode an envelope into ``(nonce, ciphertext)`` bytes.

    Raises:
        ValueError: If the envelope is not a well-formed cipher envelope
    """
    try:
        obj = json.loads(envelope)
        nonce = base64.b64decode(obj["iv"], validate=True)
        ciphertext = base64.b64decode(obj["data"], validate=True)
    except (TypeError, KeyError, json.JSONDecodeError, ValueError) as e:
        raise ValueError(f"Malformed cipher envelope: {e}") from e
    if len(nonce) != NONCE_BYTES:
        raise ValueError(f"Malformed cipher envelope: nonce must be {NONCE_BYTES} bytes")
    return nonce, ciphertext
