from .errors import (
    BuildError,
    DecodeError,
    EmptyTransaction,
    EscrowError,
    ExternalLookupFailed,
    LengthMismatch,
    MissingAccount,
    OutOfRange,
    PriceMismatch,
    UnsupportedCurrency,
    UnsupportedProgram,
)
from .marketplaces import Marketplace, build_buy_transaction, fetch_escrow, marketplace_for_program
from .rpc import EscrowLookups, RpcLookups
from .transaction import Transaction, assemble

__all__ = [
    "BuildError",
    "DecodeError",
    "EmptyTransaction",
    "EscrowError",
    "EscrowLookups",
    "ExternalLookupFailed",
    "LengthMismatch",
    "Marketplace",
    "MissingAccount",
    "OutOfRange",
    "PriceMismatch",
    "RpcLookups",
    "Transaction",
    "UnsupportedCurrency",
    "UnsupportedProgram",
    "assemble",
    "build_buy_transaction",
    "fetch_escrow",
    "marketplace_for_program",
]
