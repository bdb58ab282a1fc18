from dataclasses import dataclass, field

from src.dp_common.enums import JobState


@dataclass(frozen=True)
class IndexedFill:
    """Fill as produced by the MPC circuit: intents referenced by batch index."""

    order_index: int
    counterparty_index: int
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class EncryptedJob:
    offset: int  # random job slot, fresh per call
    ciphertexts: list[bytes]
    public_key: bytes  # ephemeral x25519 public key
    nonce: bytes
    record_count: int


@dataclass(frozen=True)
class JobStatus:
    offset: int
    state: JobState
    signature: str | None = None
    output: list[bytes] = field(default_factory=list)
    output_nonce: bytes | None = None
    error: str | None = None
