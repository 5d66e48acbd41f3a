import logging
from enum import Enum
from typing import Tuple, Union

from solders.pubkey import Pubkey

from . import magic_eden, solsea
from .errors import UnsupportedProgram
from .rpc import EscrowLookups
from .transaction import Transaction

logger = logging.getLogger(__name__)

EscrowState = Union[solsea.SolseaEscrowState, magic_eden.MagicEdenEscrowState]


class Marketplace(Enum):
    SOLSEA = "solsea"
    MAGIC_EDEN = "magic_eden"

    @property
    def program_id(self) -> Pubkey:
        if self is Marketplace.SOLSEA:
            return solsea.SOLSEA_PROGRAM_ID
        return magic_eden.MAGIC_EDEN_PROGRAM_ID

    def decode(self, data: bytes) -> EscrowState:
        if self is Marketplace.SOLSEA:
            return solsea.decode_solsea_escrow(data)
        return magic_eden.decode_magic_eden_escrow(data)


def marketplace_for_program(program_id: Pubkey) -> Marketplace:
    for marketplace in Marketplace:
        if marketplace.program_id == program_id:
            return marketplace
    raise UnsupportedProgram(program_id)


def fetch_escrow(lookups: EscrowLookups, escrow: Pubkey) -> Tuple[Marketplace, EscrowState]:
    account = lookups.get_account(escrow)
    marketplace = marketplace_for_program(account.owner)
    state = marketplace.decode(account.data)
    logger.info("escrow_fetched escrow=%s marketplace=%s price=%s", escrow, marketplace.value, state.price)
    return marketplace, state


def build_buy_transaction(
    lookups: EscrowLookups,
    escrow: Pubkey,
    buyer: Pubkey,
    *,
    max_price: int,
) -> Transaction:
    """Fetch ``escrow`` fresh and build the buy for whichever marketplace owns it.

    ``max_price`` is the most the caller agreed to pay, in lamports. The build
    fails with ``PriceMismatch`` if the on-chain price is higher.
    """
    marketplace, state = fetch_escrow(lookups, escrow)
    if marketplace is Marketplace.SOLSEA:
        return solsea.build_buy_transaction(escrow, state, buyer, max_price=max_price)
    return magic_eden.build_buy_transaction(lookups, escrow, state, buyer, max_price=max_price)
