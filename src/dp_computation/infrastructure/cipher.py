"""Ephemeral x25519 session used to encrypt one computation's inputs.

Each field is widened to a 32-byte little-endian block (the ciphertext unit
the MXE accepts) and encrypted with AES-256-CTR under a key derived from the
x25519 shared secret via HKDF-SHA256. The key lives only for the duration of
the ``with`` block.
"""

from collections.abc import Sequence

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

BLOCK_SIZE = 32
NONCE_SIZE = 16
_HKDF_INFO = b"darkpool-relayer/match_orders/v1"


class EphemeralSession:
    def __init__(
        self, network_public_key: bytes, private_key: X25519PrivateKey | None = None
    ) -> None:
        private_key = private_key or X25519PrivateKey.generate()
        peer = X25519PublicKey.from_public_bytes(network_public_key)
        self.public_key: bytes = private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )
        self._key: bytes | None = HKDF(
            algorithm=hashes.SHA256(), length=32, salt=None, info=_HKDF_INFO
        ).derive(private_key.exchange(peer))

    def __enter__(self) -> "EphemeralSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._key = None

    def _cipher(self, nonce: bytes) -> Cipher:
        if self._key is None:
            raise RuntimeError("session closed")
        if len(nonce) != NONCE_SIZE:
            raise ValueError(f"nonce must be {NONCE_SIZE} bytes")
        return Cipher(algorithms.AES(self._key), modes.CTR(nonce))

    def encrypt(self, values: Sequence[int], nonce: bytes) -> list[bytes]:
        plaintext = b"".join(v.to_bytes(BLOCK_SIZE, "little") for v in values)
        enc = self._cipher(nonce).encryptor()
        ciphertext = enc.update(plaintext) + enc.finalize()
        return [ciphertext[i:i + BLOCK_SIZE] for i in range(0, len(ciphertext), BLOCK_SIZE)]

    def decrypt(self, blocks: Sequence[bytes], nonce: bytes) -> list[int]:
        if any(len(b) != BLOCK_SIZE for b in blocks):
            raise ValueError(f"ciphertext blocks must be {BLOCK_SIZE} bytes")
        dec = self._cipher(nonce).decryptor()
        plaintext = dec.update(b"".join(blocks)) + dec.finalize()
        return [
            int.from_bytes(plaintext[i:i + BLOCK_SIZE], "little")
            for i in range(0, len(plaintext), BLOCK_SIZE)
        ]
