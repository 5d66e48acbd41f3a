"""Ledger reads needed while building buys, plus an RPC-backed implementation."""

import base64
import logging
from typing import Optional, Protocol

from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solders.pubkey import Pubkey

from .accounts import RawAccount, TokenAccount, parse_token_account
from .config import Settings, get_settings
from .errors import DecodeError, ExternalLookupFailed, MissingAccount
from .metadata import Metadata, metadata_pda, parse_metadata
from .transaction import Transaction

logger = logging.getLogger(__name__)


class EscrowLookups(Protocol):
    def get_account(self, pubkey: Pubkey) -> RawAccount:
        ...

    def get_token_account(self, pubkey: Pubkey) -> TokenAccount:
        ...

    def get_metadata_by_mint(self, mint: Pubkey) -> Metadata:
        ...


def _account_bytes(data) -> bytes:
    if isinstance(data, (list, tuple)):
        raw = data[0] if data else b""
        return base64.b64decode(raw) if not isinstance(raw, (bytes, bytearray)) else bytes(raw)
    return bytes(data)


class RpcLookups:
    def __init__(self, client: Client, commitment: Commitment = Confirmed):
        self.client = client
        self.commitment = commitment

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RpcLookups":
        settings = settings or get_settings()
        # Prefer Helius RPC if provided.
        return cls(Client(settings.helius_rpc_url or settings.solana_rpc))

    def get_account(self, pubkey: Pubkey) -> RawAccount:
        try:
            resp = self.client.get_account_info(pubkey, commitment=self.commitment)
        except (SolanaRpcException, RPCException) as exc:
            raise ExternalLookupFailed(f"RPC error reading {pubkey}: {exc}") from exc
        if resp.value is None:
            raise MissingAccount(pubkey)
        return RawAccount(owner=resp.value.owner, data=_account_bytes(resp.value.data))

    def get_token_account(self, pubkey: Pubkey) -> TokenAccount:
        account = self.get_account(pubkey)
        try:
            return parse_token_account(account.data)
        except DecodeError as exc:
            raise ExternalLookupFailed(f"{pubkey} is not a token account: {exc}") from exc

    def get_metadata_by_mint(self, mint: Pubkey) -> Metadata:
        pda = metadata_pda(mint)
        try:
            account = self.get_account(pda)
        except MissingAccount as exc:
            raise MissingAccount(pda, "metadata") from exc
        try:
            return parse_metadata(pda, account.data)
        except DecodeError as exc:
            raise ExternalLookupFailed(f"metadata for mint {mint} unreadable: {exc}") from exc

    def simulate(self, tx: Transaction):
        try:
            blockhash = self.client.get_latest_blockhash(commitment=self.commitment).value.blockhash
            resp = self.client.simulate_transaction(tx.to_versioned(blockhash), sig_verify=False)
        except (SolanaRpcException, RPCException) as exc:
            raise ExternalLookupFailed(f"simulation failed: {exc}") from exc
        logger.info("buy_simulated fee_payer=%s err=%s", tx.fee_payer, resp.value.err)
        return resp.value
