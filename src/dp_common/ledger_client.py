"""Ledger RPC client: one per process, passed explicitly to each component.

Wraps the Solana async RPC client together with the darkpool program id and
the operator keypair that signs settlement and cleanup transactions. The
underlying HTTP connection is opened lazily on first use and reused across
requests; ``close()`` is called from the app lifespan.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

import base58
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.rpc.filter import Memcmp
from solders.signature import Signature
from solders.transaction import Transaction

from config.settings import Settings
from src.dp_common.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_keypair(path: str) -> Keypair:
    """Load a keypair stored as a JSON array of 64 bytes (solana-keygen format)."""
    file = Path(path).expanduser()
    try:
        secret = json.loads(file.read_text(encoding="utf-8"))
        return Keypair.from_bytes(bytes(secret))
    except (OSError, ValueError, TypeError) as e:
        raise ConfigurationError(f"cannot load operator keypair from {file}: {e}") from e


class LedgerClient:
    def __init__(
        self,
        rpc_url: str,
        program_id: Pubkey,
        operator: Keypair,
        commitment: Commitment = Confirmed,
    ) -> None:
        self._rpc_url = rpc_url
        self._program_id = program_id
        self._operator = operator
        self._commitment = commitment
        self._client: AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "LedgerClient":
        if not settings.DARKPOOL_PROGRAM_ID:
            raise ConfigurationError("DARKPOOL_PROGRAM_ID is required")
        try:
            program_id = Pubkey.from_string(settings.DARKPOOL_PROGRAM_ID)
        except ValueError as e:
            raise ConfigurationError(f"DARKPOOL_PROGRAM_ID is not an address: {e}") from e
        return cls(
            rpc_url=settings.SOLANA_RPC_URL,
            program_id=program_id,
            operator=load_keypair(settings.DARKPOOL_ADMIN_KEYPAIR),
        )

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @property
    def operator(self) -> Pubkey:
        return self._operator.pubkey()

    def _rpc(self) -> AsyncClient:
        if self._client is None:
            self._client = AsyncClient(self._rpc_url, commitment=self._commitment)
        return self._client

    async def fetch_program_accounts(
        self, filters: Sequence[tuple[int, bytes]]
    ) -> list[tuple[str, bytes]]:
        """Return (address, raw data) for program accounts matching every memcmp filter."""
        opts = [Memcmp(offset, base58.b58encode(raw).decode("ascii")) for offset, raw in filters]
        resp = await self._rpc().get_program_accounts(
            self._program_id, encoding="base64", filters=opts
        )
        return [(str(item.pubkey), bytes(item.account.data)) for item in resp.value]

    async def fetch_account(self, address: str) -> bytes | None:
        """Raw account data, or None once the account has been closed."""
        resp = await self._rpc().get_account_info(Pubkey.from_string(address), encoding="base64")
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    async def send_instructions(self, instructions: Sequence[Instruction]) -> str:
        """Sign with the operator, submit, and wait for confirmation."""
        client = self._rpc()
        blockhash = (await client.get_latest_blockhash()).value.blockhash
        tx = Transaction.new_signed_with_payer(
            list(instructions), self._operator.pubkey(), [self._operator], blockhash
        )
        resp = await client.send_transaction(
            tx, opts=TxOpts(skip_preflight=False, preflight_commitment=self._commitment)
        )
        signature: Signature = resp.value
        await client.confirm_transaction(signature, commitment=self._commitment)
        logger.info("Transaction confirmed: %s", signature)
        return str(signature)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
