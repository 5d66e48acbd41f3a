import base64
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from .errors import EmptyTransaction

logger = logging.getLogger(__name__)

Blockhash = Union[Hash, str]


def _blockhash(value: Blockhash) -> Hash:
    return value if isinstance(value, Hash) else Hash.from_string(value)


@dataclass(frozen=True)
class Transaction:
    """Fee payer plus instructions, executed atomically in listed order."""

    fee_payer: Pubkey
    instructions: Tuple[Instruction, ...]

    def message(self, blockhash: Blockhash) -> MessageV0:
        return MessageV0.try_compile(self.fee_payer, list(self.instructions), [], _blockhash(blockhash))

    def to_versioned(self, blockhash: Blockhash) -> VersionedTransaction:
        # Placeholder signatures: fine for simulation, must be replaced before sending.
        message = self.message(blockhash)
        signatures = [Signature.default()] * message.header.num_required_signatures
        return VersionedTransaction.populate(message, signatures)

    def to_b64(self, blockhash: Blockhash) -> str:
        return base64.b64encode(bytes(self.message(blockhash))).decode()


def assemble(fee_payer: Pubkey, instructions: Sequence[Instruction]) -> Transaction:
    ixs = tuple(instructions)
    if not ixs:
        raise EmptyTransaction("a transaction needs at least one instruction")
    logger.debug("transaction_assembled fee_payer=%s instructions=%s", fee_payer, len(ixs))
    return Transaction(fee_payer=fee_payer, instructions=ixs)


def instruction_to_dict(ix: Instruction) -> dict:
    return {
        "program_id": str(ix.program_id),
        "keys": [
            {
                "pubkey": str(k.pubkey),
                "is_signer": k.is_signer,
                "is_writable": k.is_writable,
            }
            for k in ix.accounts
        ],
        "data": base64.b64encode(ix.data).decode(),
    }


def transaction_to_dict(tx: Transaction) -> dict:
    instructions: List[dict] = [instruction_to_dict(ix) for ix in tx.instructions]
    return {"fee_payer": str(tx.fee_payer), "instructions": instructions}
