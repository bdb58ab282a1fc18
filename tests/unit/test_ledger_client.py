from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.rpc.filter import Memcmp

from src.dp_common.ledger_client import LedgerClient
from tests.helpers.ledger_fixtures import MARKET, PROGRAM_ID, address, raw


def _ledger_with(rpc: MagicMock) -> LedgerClient:
    ledger = LedgerClient("http://rpc.test", Pubkey.from_string(PROGRAM_ID), Keypair())
    ledger._client = rpc
    return ledger


class TestFetchProgramAccounts:
    async def test_filters_are_memcmp_on_base58(self) -> None:
        rpc = MagicMock()
        rpc.get_program_accounts = AsyncMock(return_value=SimpleNamespace(value=[]))
        await _ledger_with(rpc).fetch_program_accounts([(0, b"\x01\x02"), (40, raw(MARKET))])

        _, kwargs = rpc.get_program_accounts.await_args
        assert kwargs["filters"] == [
            Memcmp(0, base58.b58encode(b"\x01\x02").decode("ascii")),
            Memcmp(40, MARKET),
        ]
        assert all(isinstance(f, Memcmp) for f in kwargs["filters"])

    async def test_returns_address_and_data(self) -> None:
        item = SimpleNamespace(
            pubkey=Pubkey.from_string(address(7)), account=SimpleNamespace(data=b"abc")
        )
        rpc = MagicMock()
        rpc.get_program_accounts = AsyncMock(return_value=SimpleNamespace(value=[item]))
        assert await _ledger_with(rpc).fetch_program_accounts([]) == [(address(7), b"abc")]


class TestFetchAccount:
    async def test_closed_account_is_none(self) -> None:
        rpc = MagicMock()
        rpc.get_account_info = AsyncMock(return_value=SimpleNamespace(value=None))
        assert await _ledger_with(rpc).fetch_account(address(7)) is None
