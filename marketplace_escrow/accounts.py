from dataclasses import dataclass
from typing import NamedTuple

from construct import ConstructError
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token._layouts import ACCOUNT_LAYOUT
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID

from .errors import LengthMismatch, OutOfRange

# Associated token program instruction tags.
ATA_CREATE_IDEMPOTENT = 1


class RawAccount(NamedTuple):
    owner: Pubkey
    data: bytes


@dataclass(frozen=True)
class TokenAccount:
    mint: Pubkey
    owner: Pubkey
    amount: int


def derive_ata(owner: Pubkey, mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )[0]


def build_create_ata_idempotent_ix(payer: Pubkey, owner: Pubkey, mint: Pubkey) -> Instruction:
    # Succeeds without changes when the ATA already exists.
    ata = derive_ata(owner, mint)
    metas = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=ata, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=ASSOCIATED_TOKEN_PROGRAM_ID, data=bytes([ATA_CREATE_IDEMPOTENT]), accounts=metas)


def parse_token_account(data: bytes) -> TokenAccount:
    # SPL token account layout: https://github.com/solana-labs/solana-program-library/blob/master/token/program/src/state.rs
    size = ACCOUNT_LAYOUT.sizeof()
    if len(data) < size:
        raise LengthMismatch("spl_token_account", size, len(data))
    try:
        parsed = ACCOUNT_LAYOUT.parse(bytes(data[:size]))
    except ConstructError as exc:
        raise OutOfRange(f"unable to parse token account: {exc}") from exc
    return TokenAccount(mint=Pubkey(parsed.mint), owner=Pubkey(parsed.owner), amount=parsed.amount)
