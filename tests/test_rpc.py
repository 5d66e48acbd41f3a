from __future__ import annotations

from types import SimpleNamespace

import pytest
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID

from marketplace_escrow.errors import ExternalLookupFailed, MissingAccount
from marketplace_escrow.metadata import metadata_pda
from marketplace_escrow.rpc import RpcLookups
from marketplace_escrow.transaction import assemble


class StubClient:
    def __init__(self, accounts=None, error=None):
        self.accounts = accounts or {}
        self.error = error
        self.simulated = []

    def get_account_info(self, pubkey, commitment=None):
        if self.error is not None:
            raise self.error
        account = self.accounts.get(pubkey)
        if account is None:
            return SimpleNamespace(value=None)
        owner, data = account
        return SimpleNamespace(value=SimpleNamespace(owner=owner, data=data))

    def get_latest_blockhash(self, commitment=None):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))

    def simulate_transaction(self, txn, sig_verify=False):
        self.simulated.append(txn)
        return SimpleNamespace(value=SimpleNamespace(err=None, logs=["Program log: ok"]))


def test_get_account_returns_owner_and_data():
    key, owner = Pubkey.new_unique(), Pubkey.new_unique()
    lookups = RpcLookups(StubClient({key: (owner, b"\x01\x02")}))
    account = lookups.get_account(key)
    assert account.owner == owner
    assert account.data == b"\x01\x02"


def test_missing_account():
    key = Pubkey.new_unique()
    with pytest.raises(MissingAccount) as info:
        RpcLookups(StubClient()).get_account(key)
    assert info.value.pubkey == key


def test_transport_errors_become_lookup_failures():
    client = StubClient()
    client.error = SolanaRpcException(ConnectionError("refused"), client.get_account_info)
    with pytest.raises(ExternalLookupFailed):
        RpcLookups(client).get_account(Pubkey.new_unique())


def test_json_rpc_errors_become_lookup_failures():
    error = RPCException({"code": -32602, "message": "Invalid param"})
    with pytest.raises(ExternalLookupFailed):
        RpcLookups(StubClient(error=error)).get_account(Pubkey.new_unique())


def test_json_rpc_errors_during_metadata_lookup():
    error = RPCException({"code": -32005, "message": "Node is behind"})
    with pytest.raises(ExternalLookupFailed):
        RpcLookups(StubClient(error=error)).get_metadata_by_mint(Pubkey.new_unique())


def test_token_account_read():
    key, mint, owner = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    data = bytes(mint) + bytes(owner) + (1).to_bytes(8, "little") + bytes(93)
    lookups = RpcLookups(StubClient({key: (TOKEN_PROGRAM_ID, data)}))
    assert lookups.get_token_account(key).mint == mint


def test_garbage_token_account_is_a_lookup_failure():
    key = Pubkey.new_unique()
    lookups = RpcLookups(StubClient({key: (TOKEN_PROGRAM_ID, b"\x00" * 10)}))
    with pytest.raises(ExternalLookupFailed):
        lookups.get_token_account(key)


def test_missing_metadata_names_the_pda():
    mint = Pubkey.new_unique()
    with pytest.raises(MissingAccount) as info:
        RpcLookups(StubClient()).get_metadata_by_mint(mint)
    assert info.value.pubkey == metadata_pda(mint)


def test_simulate_sends_unsigned_versioned_transaction():
    payer = Pubkey.new_unique()
    ix = Instruction(Pubkey.new_unique(), b"\x00", [AccountMeta(payer, True, True)])
    client = StubClient()
    result = RpcLookups(client).simulate(assemble(payer, [ix]))
    assert result.err is None
    assert isinstance(client.simulated[0], VersionedTransaction)


def test_simulation_rpc_errors_become_lookup_failures():
    payer = Pubkey.new_unique()
    ix = Instruction(Pubkey.new_unique(), b"\x00", [AccountMeta(payer, True, True)])
    error = RPCException({"code": -32002, "message": "Transaction simulation failed"})
    with pytest.raises(ExternalLookupFailed):
        RpcLookups(StubClient(error=error)).simulate(assemble(payer, [ix]))
