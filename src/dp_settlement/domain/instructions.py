"""Instruction builders for the darkpool program.

Anchor instruction data is ``sha256("global:<name>")[:8]`` followed by the
Borsh-encoded arguments. ``Vec<T>`` is a u32 length prefix plus the items.

settle_batch(fills: Vec<Fill{order, counterparty, amount_in u64, amount_out u64}>,
             arcium_signature: Vec<u8>)
    named:     config PDA, operator (signer, writable), market
    remaining: base_vault (w), quote_vault (w), market, token program,
               then per fill: order (w), counterparty (w),
               order owner base (w), order owner quote (w),
               counterparty owner base (w), counterparty owner quote (w)

cancel_order()
    order (w), owner (signer, w), market, owner base (w), owner quote (w),
    base_vault (w), quote_vault (w), token program
"""
import hashlib
import struct
from collections.abc import Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from src.dp_intent.domain.models import Intent, Market
from src.dp_matching.domain.models import Fill
from src.dp_settlement.domain.accounts import (
    TOKEN_PROGRAM_ID,
    associated_token_address,
    config_address,
)

_FILL_LAYOUT = struct.Struct("<32s32sQQ")
_VEC_LEN = struct.Struct("<I")

FIXED_SETTLE_ACCOUNTS = 4
ACCOUNTS_PER_FILL = 6


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


SETTLE_BATCH_DISCRIMINATOR = instruction_discriminator("settle_batch")
CANCEL_ORDER_DISCRIMINATOR = instruction_discriminator("cancel_order")


def _writable(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=True)


def _readonly(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=False, is_writable=False)


def encode_settle_batch_args(fills: Sequence[Fill], attestation: bytes) -> bytes:
    parts = [SETTLE_BATCH_DISCRIMINATOR, _VEC_LEN.pack(len(fills))]
    for f in fills:
        parts.append(_FILL_LAYOUT.pack(
            bytes(Pubkey.from_string(f.order)),
            bytes(Pubkey.from_string(f.counterparty)),
            f.amount_in,
            f.amount_out,
        ))
    parts.append(_VEC_LEN.pack(len(attestation)))
    parts.append(attestation)
    return b"".join(parts)


def settle_batch_accounts(
    program_id: Pubkey, operator: Pubkey, market: Market, fills: Sequence[Fill]
) -> list[AccountMeta]:
    market_key = Pubkey.from_string(market.address)
    base_mint = Pubkey.from_string(market.base_mint)
    quote_mint = Pubkey.from_string(market.quote_mint)

    metas = [
        _readonly(config_address(program_id)),
        AccountMeta(operator, is_signer=True, is_writable=True),
        _readonly(market_key),
        _writable(Pubkey.from_string(market.base_vault)),
        _writable(Pubkey.from_string(market.quote_vault)),
        _readonly(market_key),
        _readonly(TOKEN_PROGRAM_ID),
    ]
    for f in fills:
        order_owner = Pubkey.from_string(f.order_owner)
        cp_owner = Pubkey.from_string(f.counterparty_owner)
        metas.extend(_writable(k) for k in (
            Pubkey.from_string(f.order),
            Pubkey.from_string(f.counterparty),
            associated_token_address(order_owner, base_mint),
            associated_token_address(order_owner, quote_mint),
            associated_token_address(cp_owner, base_mint),
            associated_token_address(cp_owner, quote_mint),
        ))
    return metas


def build_settle_batch_instruction(
    program_id: Pubkey,
    operator: Pubkey,
    market: Market,
    fills: Sequence[Fill],
    attestation: bytes,
) -> Instruction:
    return Instruction(
        program_id,
        encode_settle_batch_args(fills, attestation),
        settle_batch_accounts(program_id, operator, market, fills),
    )


def build_cancel_order_instruction(
    program_id: Pubkey, intent: Intent, market: Market
) -> Instruction:
    owner = Pubkey.from_string(intent.owner)
    accounts = [
        _writable(Pubkey.from_string(intent.address)),
        AccountMeta(owner, is_signer=True, is_writable=True),
        _readonly(Pubkey.from_string(market.address)),
        _writable(associated_token_address(owner, Pubkey.from_string(market.base_mint))),
        _writable(associated_token_address(owner, Pubkey.from_string(market.quote_mint))),
        _writable(Pubkey.from_string(market.base_vault)),
        _writable(Pubkey.from_string(market.quote_vault)),
        _readonly(TOKEN_PROGRAM_ID),
    ]
    return Instruction(program_id, CANCEL_ORDER_DISCRIMINATOR, accounts)
