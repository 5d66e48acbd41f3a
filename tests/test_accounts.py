from __future__ import annotations

import pytest
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID
from spl.token.instructions import get_associated_token_address

from marketplace_escrow.accounts import build_create_ata_idempotent_ix, derive_ata, parse_token_account
from marketplace_escrow.errors import DecodeError, LengthMismatch
from marketplace_escrow.metadata import (
    TOKEN_METADATA_PROGRAM_ID,
    MetadataLayout,
    metadata_pda,
    parse_metadata,
)


def _token_account_bytes(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    return bytes(mint) + bytes(owner) + amount.to_bytes(8, "little") + bytes(165 - 72)


def _metadata_bytes(mint: Pubkey, creators, key: int = 4) -> bytes:
    return MetadataLayout.build(
        {
            "key": key,
            "update_authority": Pubkey.new_unique(),
            "mint": mint,
            "name": "Ape #12" + "\x00" * 25,
            "symbol": "APE" + "\x00" * 7,
            "uri": "https://arweave.net/abc" + "\x00" * 10,
            "seller_fee_basis_points": 420,
            "creators": creators,
        }
    ) + bytes(64)


def test_derive_ata_matches_spl():
    owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
    assert derive_ata(owner, mint) == get_associated_token_address(owner, mint)


def test_create_ata_is_idempotent_variant():
    payer, owner, mint = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    ix = build_create_ata_idempotent_ix(payer, owner, mint)
    assert ix.program_id == ASSOCIATED_TOKEN_PROGRAM_ID
    assert bytes(ix.data) == b"\x01"
    assert [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts] == [
        (payer, True, True),
        (derive_ata(owner, mint), False, True),
        (owner, False, False),
        (mint, False, False),
        (SYS_PROGRAM_ID, False, False),
        (TOKEN_PROGRAM_ID, False, False),
    ]


def test_parse_token_account():
    mint, owner = Pubkey.new_unique(), Pubkey.new_unique()
    parsed = parse_token_account(_token_account_bytes(mint, owner, 1))
    assert parsed.mint == mint
    assert parsed.owner == owner
    assert parsed.amount == 1


def test_short_token_account_is_rejected():
    with pytest.raises(LengthMismatch):
        parse_token_account(bytes(100))


def test_metadata_pda_seeds():
    mint = Pubkey.new_unique()
    expected = Pubkey.find_program_address(
        [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)], TOKEN_METADATA_PROGRAM_ID
    )[0]
    assert metadata_pda(mint) == expected


def test_parse_metadata_creators_in_order():
    mint = Pubkey.new_unique()
    first, second = Pubkey.new_unique(), Pubkey.new_unique()
    data = _metadata_bytes(
        mint,
        [
            {"address": first, "verified": True, "share": 0},
            {"address": second, "verified": False, "share": 100},
        ],
    )
    pda = metadata_pda(mint)
    metadata = parse_metadata(pda, data)
    assert metadata.pubkey == pda
    assert metadata.mint == mint
    assert metadata.name == "Ape #12"
    assert metadata.symbol == "APE"
    assert metadata.uri == "https://arweave.net/abc"
    assert metadata.seller_fee_basis_points == 420
    assert [c.address for c in metadata.creators] == [first, second]
    assert [c.share for c in metadata.creators] == [0, 100]
    assert metadata.creators[0].verified is True


def test_parse_metadata_without_creators():
    mint = Pubkey.new_unique()
    metadata = parse_metadata(metadata_pda(mint), _metadata_bytes(mint, None))
    assert metadata.creators == ()


def test_parse_metadata_rejects_other_accounts():
    mint = Pubkey.new_unique()
    with pytest.raises(DecodeError):
        parse_metadata(metadata_pda(mint), _metadata_bytes(mint, None, key=6))
    with pytest.raises(DecodeError):
        parse_metadata(metadata_pda(mint), bytes(40))
