"""
Magic Eden escrow: escrow record decoding and the buy instruction.

The program is closed source. The record layout and the buy ABI were read
off mainnet transactions:

- list:   UcEGgWqHprxkfTApNECUCemh6KtHDqJ1eGnyie85YNDLCgxxfS61du9SKiTTBgvXGYDMcjGLPp9ch3m783QRz9A
- delist: 4Tdm5KTu4TfEV8UFiy8Q2tT4EG7P4pZbxeFXnEEqHsVY83uSUhx54tjYWR8FVp5Q35ym4wtFivmah2zsEdmLk6wv
- buy:    2TGe7grZEyc1qB1TGCD3oJ9WESwjbRefv5uu7JQjtA1wrCc3zvkaSmgkRLRYMstXAAzkrkyJM4Z7WTndnM9X8ifo
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID

from .codec import PUBKEY, U64, Buffer, raw, u64_bytes
from .config import get_settings, load_pubkey, load_selector
from .decoder import decode
from .errors import ExternalLookupFailed, PriceMismatch
from .layout import Field, Layout
from .metadata import Metadata
from .rpc import EscrowLookups
from .transaction import Transaction, assemble

logger = logging.getLogger(__name__)

_settings = get_settings()
MAGIC_EDEN_PROGRAM_ID = load_pubkey(_settings, "magic_eden_program_id")
MAGIC_EDEN_AUTHORITY = load_pubkey(_settings, "magic_eden_authority")
MAGIC_EDEN_PLATFORM_FEE_ACCOUNT = load_pubkey(_settings, "magic_eden_platform_fee_account")
BUY_SELECTOR = load_selector(_settings, "magic_eden_buy_selector")

BUY_DATA_LENGTH = 48


@dataclass(frozen=True)
class MagicEdenEscrowState:
    # Probably an anchor account discriminator; never interpreted.
    discriminator: bytes
    seller: Pubkey
    token_account: Pubkey
    price: int


MAGIC_EDEN_ESCROW_LAYOUT = Layout(
    "magic_eden_escrow",
    [
        Field("discriminator", raw(8)),
        Field("seller", PUBKEY),
        Field("token_account", PUBKEY),
        Field("price", U64),
    ],
    MagicEdenEscrowState,
)


def decode_magic_eden_escrow(data: Buffer) -> MagicEdenEscrowState:
    return decode(MAGIC_EDEN_ESCROW_LAYOUT, data)


def encode_buy(price: int, nft_mint: Pubkey) -> bytes:
    return BUY_SELECTOR + u64_bytes(price) + bytes(nft_mint)


def build_buy_ix(
    escrow: Pubkey,
    state: MagicEdenEscrowState,
    nft_mint: Pubkey,
    metadata: Metadata,
    buyer: Pubkey,
    max_price: Optional[int] = None,
) -> Instruction:
    if max_price is not None and state.price > max_price:
        raise PriceMismatch(state.price, max_price)
    if metadata.mint != nft_mint:
        raise ExternalLookupFailed(f"metadata {metadata.pubkey} is for mint {metadata.mint}, not {nft_mint}")
    accounts: List[AccountMeta] = [
        AccountMeta(pubkey=buyer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=state.token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=state.seller, is_signer=False, is_writable=True),
        AccountMeta(pubkey=escrow, is_signer=False, is_writable=True),
        AccountMeta(pubkey=MAGIC_EDEN_AUTHORITY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=MAGIC_EDEN_PLATFORM_FEE_ACCOUNT, is_signer=False, is_writable=True),
        AccountMeta(pubkey=metadata.pubkey, is_signer=False, is_writable=False),
    ]
    # Royalty recipients, in metadata order.
    accounts.extend(
        [AccountMeta(pubkey=creator.address, is_signer=False, is_writable=True) for creator in metadata.creators]
    )
    logger.debug("magic_eden_buy_accounts escrow=%s keys=%s", escrow, [str(a.pubkey) for a in accounts])
    return Instruction(program_id=MAGIC_EDEN_PROGRAM_ID, data=encode_buy(state.price, nft_mint), accounts=accounts)


def build_buy_transaction(
    lookups: EscrowLookups,
    escrow: Pubkey,
    state: MagicEdenEscrowState,
    buyer: Pubkey,
    *,
    max_price: int,
) -> Transaction:
    # Fail on price before spending any lookups.
    if state.price > max_price:
        raise PriceMismatch(state.price, max_price)
    nft_mint = lookups.get_token_account(state.token_account).mint
    metadata = lookups.get_metadata_by_mint(nft_mint)
    buy_ix = build_buy_ix(escrow, state, nft_mint, metadata, buyer, max_price=max_price)
    logger.info("magic_eden_buy_built escrow=%s buyer=%s mint=%s price=%s", escrow, buyer, nft_mint, state.price)
    return assemble(buyer, [buy_ix])
