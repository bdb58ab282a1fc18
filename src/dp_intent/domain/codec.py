"""Decoders for darkpool program accounts.

Anchor prefixes every account with ``sha256("account:<Name>")[:8]`` and
serializes the struct with Borsh (little-endian, enums as u8 variant index,
pubkeys as 32 raw bytes).

Order (after discriminator):
    owner          32
    market         32
    side           u8    0=Bid 1=Ask
    amount_in      u64
    filled_amount  u64
    min_amount_out u64
    status         u8    0=Open 1=PartiallyFilled 2=Filled 3=Cancelled
    created_at     i64
    bump           u8
    nonce          u64

Market (after discriminator):
    base_mint, quote_mint, base_vault, quote_vault  4 x 32
    bump                                            u8
"""
import hashlib
import struct

import base58

from src.dp_common.enums import IntentStatus, Side
from src.dp_common.errors import AdapterDecodeError
from src.dp_intent.domain.models import Intent, Market

DISCRIMINATOR_LEN = 8

_ORDER_LAYOUT = struct.Struct("<32s32sBQQQBqBQ")
_MARKET_LAYOUT = struct.Struct("<32s32s32s32sB")

# Byte offset of Order.market, for ledger-side memcmp filtering
ORDER_MARKET_OFFSET = DISCRIMINATOR_LEN + 32


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_LEN]


ORDER_DISCRIMINATOR = account_discriminator("Order")
MARKET_DISCRIMINATOR = account_discriminator("Market")


def encode_address(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def decode_address(address: str) -> bytes:
    raw = base58.b58decode(address)
    if len(raw) != 32:
        raise ValueError(f"address {address!r} is {len(raw)} bytes, expected 32")
    return raw


def _body(address: str, data: bytes, discriminator: bytes, layout: struct.Struct) -> tuple:
    if data[:DISCRIMINATOR_LEN] != discriminator:
        raise AdapterDecodeError(address, "discriminator mismatch")
    if len(data) < DISCRIMINATOR_LEN + layout.size:
        raise AdapterDecodeError(
            address,
            f"{len(data)} bytes, expected at least {DISCRIMINATOR_LEN + layout.size}",
        )
    return layout.unpack_from(data, DISCRIMINATOR_LEN)


def decode_order(address: str, data: bytes) -> Intent:
    """Decode an Order account. Raises AdapterDecodeError on any incompatibility."""
    (owner, market, side_tag, amount_in, filled, min_out,
     status_tag, created_at, _bump, nonce) = _body(address, data, ORDER_DISCRIMINATOR, _ORDER_LAYOUT)
    try:
        return Intent(
            address=address,
            owner=encode_address(owner),
            market=encode_address(market),
            side=Side.from_tag(side_tag),
            committed_amount=amount_in,
            filled_amount=filled,
            min_output=min_out,
            status=IntentStatus.from_tag(status_tag),
            created_at=created_at,
            nonce=nonce,
        )
    except ValueError as e:
        raise AdapterDecodeError(address, str(e)) from e


def decode_market(address: str, data: bytes) -> Market:
    base_mint, quote_mint, base_vault, quote_vault, _bump = _body(
        address, data, MARKET_DISCRIMINATOR, _MARKET_LAYOUT
    )
    return Market(
        address=address,
        base_mint=encode_address(base_mint),
        quote_mint=encode_address(quote_mint),
        base_vault=encode_address(base_vault),
        quote_vault=encode_address(quote_vault),
    )
