# surety_oracle/context.py
"""
Everything the registrar and responder share, built once at startup.
"""

import enum
import random
from dataclasses import dataclass, field

from surety_oracle import LedgerError
from surety_oracle.config import NUM_ORACLES, REGISTRATION_GAS, RESPONSE_GAS


class FailurePolicy(str, enum.Enum):
    CONTINUE = "continue"  # log, move on to the next slot
    ABORT = "abort"        # drop the remaining slots for this request


@dataclass
class OracleContext:
    ledger: object
    account: str
    num_oracles: int = NUM_ORACLES
    registration_gas: int = REGISTRATION_GAS
    response_gas: int = RESPONSE_GAS
    failure_policy: FailurePolicy = FailurePolicy.CONTINUE
    rng: random.Random = field(default_factory=random.Random)


async def build_context(ledger, **options) -> OracleContext:
    """Pick the ledger's first account as the default sender."""
    accounts = await ledger.accounts()
    if not accounts:
        raise LedgerError("Ledger node exposes no accounts")
    return OracleContext(ledger=ledger, account=accounts[0], **options)
