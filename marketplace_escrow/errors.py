"""Exceptions raised while decoding escrow accounts and building buys."""

from typing import Optional


class EscrowError(Exception):
    pass


class DecodeError(EscrowError, ValueError):
    pass


class LengthMismatch(DecodeError):
    def __init__(self, layout: str, expected: int, actual: int):
        self.layout = layout
        self.expected = expected
        self.actual = actual
        super().__init__(f"{layout}: expected {expected} bytes, got {actual}")


class OutOfRange(DecodeError):
    pass


class BuildError(EscrowError):
    pass


class UnsupportedCurrency(BuildError):
    def __init__(self, currency_mint):
        self.currency_mint = currency_mint
        super().__init__(f"currency mint other than SOL not supported: {currency_mint}")


class PriceMismatch(BuildError):
    def __init__(self, price: int, max_price: int):
        self.price = price
        self.max_price = max_price
        super().__init__(f"escrow price {price} exceeds accepted maximum {max_price}")


class MissingAccount(BuildError):
    def __init__(self, pubkey, what: Optional[str] = None):
        self.pubkey = pubkey
        label = f"{what} " if what else ""
        super().__init__(f"{label}account {pubkey} not found")


class ExternalLookupFailed(BuildError):
    pass


class UnsupportedProgram(BuildError):
    def __init__(self, program_id):
        self.program_id = program_id
        super().__init__(f"no marketplace registered for program {program_id}")


class EmptyTransaction(BuildError):
    pass
