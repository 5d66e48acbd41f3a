"""
Solsea escrow v3: escrow record decoding and the ``Buy`` instruction.

The program source is published, so the buy account list below mirrors the
documented ``EscrowInstruction::Buy`` ABI. AART staking is not modelled: every
AART-related slot receives the system program id, which the program treats
as "nothing staked".
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID

from .accounts import build_create_ata_idempotent_ix, derive_ata
from .codec import NATIVE_MINT, PUBKEY, U8, U16, U64, Buffer
from .config import get_settings, load_pubkey
from .decoder import decode
from .errors import LengthMismatch, OutOfRange, PriceMismatch, UnsupportedCurrency
from .layout import Field, Layout
from .transaction import Transaction, assemble

logger = logging.getLogger(__name__)

_settings = get_settings()
SOLSEA_PROGRAM_ID = load_pubkey(_settings, "solsea_program_id")
SOLSEA_PLATFORM_FEE_ACCOUNT = load_pubkey(_settings, "solsea_platform_fee_account")

BUY_TAG = 2
MAX_CREATORS = 5

STATE_LISTED = 0
STATE_DELISTED = 1
STATE_BOUGHT = 2
STATE_NAMES = {STATE_LISTED: "listed", STATE_DELISTED: "delisted", STATE_BOUGHT: "bought"}


@dataclass(frozen=True)
class SolseaEscrowState:
    state: int
    nonce: int
    price: int
    mint: Pubkey
    seller_nft_account: Pubkey
    wallet: Pubkey
    program_nft_account: Pubkey
    currency_mint: Pubkey
    authority_account: Pubkey
    creator_count: int
    seller_fee: int
    creator_percentage: Tuple[int, ...]
    creators: Tuple[Pubkey, ...]
    seller_token_account: Pubkey
    buyer: Pubkey
    # v2 records only
    stake_amount: int = 0
    program_stake_account: Optional[Pubkey] = None
    # v1 records only
    fee_account: Optional[Pubkey] = None

    def __post_init__(self):
        if self.creator_count > len(self.creators):
            raise OutOfRange(f"creator_count {self.creator_count} exceeds capacity {len(self.creators)}")

    @property
    def active_creators(self) -> Tuple[Pubkey, ...]:
        """Creator slots past ``creator_count`` are padding."""
        return self.creators[: self.creator_count]

    @property
    def is_listed(self) -> bool:
        return self.state == STATE_LISTED


SOLSEA_ESCROW_LAYOUT = Layout(
    "solsea_escrow_v2",
    [
        Field("state", U8),
        Field("nonce", U8),
        Field("price", U64),
        Field("stake_amount", U64),
        Field("mint", PUBKEY),
        Field("seller_nft_account", PUBKEY),
        Field("wallet", PUBKEY),
        Field("program_nft_account", PUBKEY),
        Field("currency_mint", PUBKEY),
        Field("authority_account", PUBKEY),
        Field("creator_count", U8),
        Field("seller_fee", U16),
        Field("creator_percentage", U8, MAX_CREATORS),
        Field("creators", PUBKEY, MAX_CREATORS),
        Field("seller_token_account", PUBKEY),
        Field("buyer", PUBKEY),
        Field("program_stake_account", PUBKEY),
    ],
    SolseaEscrowState,
)

SOLSEA_ESCROW_V1_LAYOUT = Layout(
    "solsea_escrow_v1",
    [
        Field("state", U8),
        Field("nonce", U8),
        Field("price", U64),
        Field("mint", PUBKEY),
        Field("seller_nft_account", PUBKEY),
        Field("wallet", PUBKEY),
        Field("program_nft_account", PUBKEY),
        Field("fee_account", PUBKEY),
        Field("currency_mint", PUBKEY),
        Field("authority_account", PUBKEY),
        Field("creator_count", U8),
        Field("seller_fee", U16),
        Field("creator_percentage", U8, MAX_CREATORS),
        Field("creators", PUBKEY, MAX_CREATORS),
        Field("seller_token_account", PUBKEY),
        Field("buyer", PUBKEY),
    ],
    SolseaEscrowState,
)

LAYOUTS_BY_SIZE: Dict[int, Layout] = {
    layout.size: layout for layout in (SOLSEA_ESCROW_LAYOUT, SOLSEA_ESCROW_V1_LAYOUT)
}


def decode_solsea_escrow(data: Buffer) -> SolseaEscrowState:
    layout = LAYOUTS_BY_SIZE.get(len(data))
    if layout is None:
        raise LengthMismatch(SOLSEA_ESCROW_LAYOUT.name, SOLSEA_ESCROW_LAYOUT.size, len(data))
    return decode(layout, data)


def authority_pda(escrow: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([bytes(escrow)], SOLSEA_PROGRAM_ID)[0]


def encode_buy(nonce: int) -> bytes:
    return bytes([BUY_TAG, nonce])


def build_buy_ix(
    escrow: Pubkey,
    state: SolseaEscrowState,
    buyer: Pubkey,
    buyer_nft_account: Pubkey,
    max_price: Optional[int] = None,
) -> Instruction:
    if state.currency_mint != NATIVE_MINT:
        raise UnsupportedCurrency(state.currency_mint)
    if max_price is not None and state.price > max_price:
        raise PriceMismatch(state.price, max_price)
    if not state.is_listed:
        logger.warning(
            "solsea_escrow_not_listed escrow=%s state=%s",
            escrow,
            STATE_NAMES.get(state.state, state.state),
        )

    authority = authority_pda(escrow)
    # Price is paid in SOL straight from the buyer's wallet.
    source = buyer
    seller = state.wallet
    # Staking slots: the system program id means "no AART staked".
    seller_aart_account = SYS_PROGRAM_ID
    program_aart_account = SYS_PROGRAM_ID
    stake_authority = SYS_PROGRAM_ID
    platform_staked_aart_account = SYS_PROGRAM_ID

    accounts: List[AccountMeta] = [
        AccountMeta(pubkey=escrow, is_signer=False, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=False, is_writable=True),
        AccountMeta(pubkey=buyer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=False, is_writable=True),
        AccountMeta(pubkey=source, is_signer=True, is_writable=True),
        AccountMeta(pubkey=seller, is_signer=False, is_writable=True),
        AccountMeta(pubkey=buyer_nft_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=SOLSEA_PLATFORM_FEE_ACCOUNT, is_signer=False, is_writable=True),
        AccountMeta(pubkey=state.program_nft_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=seller_aart_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=program_aart_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=stake_authority, is_signer=False, is_writable=True),
        AccountMeta(pubkey=state.seller_token_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=platform_staked_aart_account, is_signer=False, is_writable=True),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=True),
    ]
    # Royalty split accounts
    accounts.extend(
        [AccountMeta(pubkey=creator, is_signer=False, is_writable=True) for creator in state.active_creators]
    )
    logger.debug("solsea_buy_accounts escrow=%s keys=%s", escrow, [str(a.pubkey) for a in accounts])
    return Instruction(program_id=SOLSEA_PROGRAM_ID, data=encode_buy(state.nonce), accounts=accounts)


def build_buy_transaction(
    escrow: Pubkey,
    state: SolseaEscrowState,
    buyer: Pubkey,
    *,
    max_price: int,
) -> Transaction:
    buyer_nft_account = derive_ata(buyer, state.mint)
    buy_ix = build_buy_ix(escrow, state, buyer, buyer_nft_account, max_price=max_price)
    # The buy writes into the buyer's ATA, so it has to exist first.
    ixs = [build_create_ata_idempotent_ix(buyer, buyer, state.mint), buy_ix]
    logger.info("solsea_buy_built escrow=%s buyer=%s price=%s", escrow, buyer, state.price)
    return assemble(buyer, ixs)
