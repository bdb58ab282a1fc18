"""Address derivation for settlement and cleanup instructions."""
from solders.pubkey import Pubkey

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)

_CONFIG_SEED = b"config"


def associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Owner's token sub-account for ``mint``."""
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def config_address(program_id: Pubkey) -> Pubkey:
    address, _bump = Pubkey.find_program_address([_CONFIG_SEED], program_id)
    return address
