"""Shared fixtures: fresh pubkeys, escrow state factories and an in-memory ledger."""

from __future__ import annotations

from typing import Callable, Dict

import pytest
from solders.pubkey import Pubkey

from marketplace_escrow.accounts import RawAccount, TokenAccount
from marketplace_escrow.codec import NATIVE_MINT
from marketplace_escrow.errors import MissingAccount
from marketplace_escrow.magic_eden import MagicEdenEscrowState
from marketplace_escrow.metadata import Creator, Metadata, metadata_pda
from marketplace_escrow.solsea import SolseaEscrowState


class FakeLookups:
    """In-memory stand-in for the ledger, recording every call made."""

    def __init__(self):
        self.accounts: Dict[Pubkey, RawAccount] = {}
        self.token_accounts: Dict[Pubkey, TokenAccount] = {}
        self.metadata: Dict[Pubkey, Metadata] = {}
        self.calls = []

    def get_account(self, pubkey: Pubkey) -> RawAccount:
        self.calls.append(("get_account", pubkey))
        if pubkey not in self.accounts:
            raise MissingAccount(pubkey)
        return self.accounts[pubkey]

    def get_token_account(self, pubkey: Pubkey) -> TokenAccount:
        self.calls.append(("get_token_account", pubkey))
        if pubkey not in self.token_accounts:
            raise MissingAccount(pubkey, "token")
        return self.token_accounts[pubkey]

    def get_metadata_by_mint(self, mint: Pubkey) -> Metadata:
        self.calls.append(("get_metadata_by_mint", mint))
        if mint not in self.metadata:
            raise MissingAccount(metadata_pda(mint), "metadata")
        return self.metadata[mint]


@pytest.fixture
def lookups() -> FakeLookups:
    return FakeLookups()


@pytest.fixture
def make_solsea_state() -> Callable[..., SolseaEscrowState]:
    def _make(**overrides) -> SolseaEscrowState:
        fields = dict(
            state=0,
            nonce=254,
            price=1_500_000_000,
            mint=Pubkey.new_unique(),
            seller_nft_account=Pubkey.new_unique(),
            wallet=Pubkey.new_unique(),
            program_nft_account=Pubkey.new_unique(),
            currency_mint=NATIVE_MINT,
            authority_account=Pubkey.new_unique(),
            creator_count=2,
            seller_fee=500,
            creator_percentage=(60, 40, 0, 0, 0),
            creators=tuple(Pubkey.new_unique() for _ in range(5)),
            seller_token_account=Pubkey.new_unique(),
            buyer=NATIVE_MINT,
            stake_amount=0,
            program_stake_account=Pubkey.new_unique(),
        )
        fields.update(overrides)
        return SolseaEscrowState(**fields)

    return _make


@pytest.fixture
def make_magic_eden_state() -> Callable[..., MagicEdenEscrowState]:
    def _make(**overrides) -> MagicEdenEscrowState:
        fields = dict(
            discriminator=bytes(range(1, 9)),
            seller=Pubkey.new_unique(),
            token_account=Pubkey.new_unique(),
            price=2_000_000_000,
        )
        fields.update(overrides)
        return MagicEdenEscrowState(**fields)

    return _make


@pytest.fixture
def make_metadata() -> Callable[..., Metadata]:
    def _make(mint: Pubkey, shares=(100,)) -> Metadata:
        return Metadata(
            pubkey=metadata_pda(mint),
            mint=mint,
            update_authority=Pubkey.new_unique(),
            name="Ape #1",
            symbol="APE",
            uri="https://example.com/1.json",
            seller_fee_basis_points=500,
            creators=tuple(Creator(address=Pubkey.new_unique(), verified=True, share=s) for s in shares),
        )

    return _make
