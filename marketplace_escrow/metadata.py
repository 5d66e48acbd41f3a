"""
Metaplex token-metadata account parsing.

Unlike escrow records, metadata accounts are borsh-encoded with
length-prefixed strings and an optional creator vector, so this module is
the only place a length-prefixed codec is used. Only the leading fields up
to ``creators`` are parsed; everything after them is ignored.
"""

from dataclasses import dataclass
from typing import Tuple

import borsh_construct as borsh
from borsh_construct import CStruct, Option, String, Vec
from construct import ConstructError
from solders.pubkey import Pubkey

from .codec import PubkeyAdapter
from .errors import DecodeError

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
METADATA_SEED = b"metadata"
METADATA_KEY_V1 = 4

CreatorLayout = CStruct(
    "address" / PubkeyAdapter(),
    "verified" / borsh.Bool,
    "share" / borsh.U8,
)
MetadataLayout = CStruct(
    "key" / borsh.U8,
    "update_authority" / PubkeyAdapter(),
    "mint" / PubkeyAdapter(),
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "seller_fee_basis_points" / borsh.U16,
    "creators" / Option(Vec(CreatorLayout)),
)


@dataclass(frozen=True)
class Creator:
    address: Pubkey
    verified: bool
    share: int


@dataclass(frozen=True)
class Metadata:
    pubkey: Pubkey
    mint: Pubkey
    update_authority: Pubkey
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int
    creators: Tuple[Creator, ...]


def metadata_pda(mint: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )[0]


def _clean(value: str) -> str:
    # On-chain strings are right-padded with NULs.
    return value.rstrip("\x00")


def parse_metadata(pubkey: Pubkey, data: bytes) -> Metadata:
    try:
        parsed = MetadataLayout.parse(bytes(data))
    except (ConstructError, UnicodeDecodeError) as exc:
        raise DecodeError(f"unable to parse metadata account {pubkey}: {exc}") from exc
    if parsed.key != METADATA_KEY_V1:
        raise DecodeError(f"account {pubkey} is not a metadata account (key={parsed.key})")
    creators = tuple(
        Creator(address=c.address, verified=bool(c.verified), share=c.share) for c in (parsed.creators or [])
    )
    return Metadata(
        pubkey=pubkey,
        mint=parsed.mint,
        update_authority=parsed.update_authority,
        name=_clean(parsed.name),
        symbol=_clean(parsed.symbol),
        uri=_clean(parsed.uri),
        seller_fee_basis_points=parsed.seller_fee_basis_points,
        creators=creators,
    )
