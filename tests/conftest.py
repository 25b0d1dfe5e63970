import random

import pytest

from surety_oracle import LedgerError
from surety_oracle.context import OracleContext
from surety_oracle.ledger import Delivery, OracleRequest

OWNER = "0x627306090abaB3A6e1400e9345bC60c78a8BEf57"
AIRLINE = "0xf17f52151EbEF6C7334FAD080c5704D77216b732"
ONE_ETHER = 10 ** 18


class FakeLedger:
    """In-memory stand-in for LedgerClient that records every call."""

    def __init__(self, accounts=(OWNER,), fee=ONE_ETHER, indexes=None, deliveries=(),
                 reject_registrations=(), reject_lookups=(), reject_submissions=()):
        self._accounts = list(accounts)
        self.fee = fee
        self.indexes = indexes or {}
        self.deliveries = list(deliveries)
        self.reject_registrations = set(reject_registrations)
        self.reject_lookups = set(reject_lookups)
        self.reject_submissions = set(reject_submissions)

        self.fee_reads = 0
        self.registrations = []
        self.lookups = []
        self.submissions = []
        self.streams = []
        self.closed = False

    async def accounts(self):
        return list(self._accounts)

    async def registration_fee(self):
        self.fee_reads += 1
        return self.fee

    async def register_oracle(self, sender, fee, gas):
        attempt = len(self.registrations)
        if attempt in self.reject_registrations:
            raise LedgerError(f"registerOracle failed: revert on attempt {attempt}")
        self.registrations.append({"from": sender, "value": fee, "gas": gas})
        return f"0xreg{attempt}"

    async def get_my_indexes(self, slot, sender):
        self.lookups.append((slot, sender))
        if slot in self.reject_lookups:
            raise LedgerError(f"getMyIndexes({slot}) failed: not registered")
        return list(self.indexes.get(slot, []))

    async def submit_oracle_response(self, request, status_code, sender, gas):
        slot = self.lookups[-1][0]
        if slot in self.reject_submissions:
            raise LedgerError("submitOracleResponse failed: revert Flight or timestamp do not match")
        self.submissions.append({
            "slot": slot,
            "request": request,
            "status_code": status_code,
            "from": sender,
            "gas": gas,
        })
        return f"0xresp{len(self.submissions)}"

    async def oracle_requests(self, from_block=0, poll_interval=1.0):
        self.streams.append((from_block, poll_interval))
        for delivery in self.deliveries:
            yield delivery

    async def close(self):
        self.closed = True


@pytest.fixture
def make_ledger():
    return FakeLedger


@pytest.fixture
def make_request():
    def _factory(index=2, airline=AIRLINE, flight="ND1309", timestamp=1700000000):
        return OracleRequest(index=index, airline=airline, flight=flight, timestamp=timestamp)
    return _factory


@pytest.fixture
def make_context():
    def _factory(ledger, num_oracles=3, **options):
        options.setdefault("rng", random.Random(1309))
        return OracleContext(ledger=ledger, account=OWNER, num_oracles=num_oracles, **options)
    return _factory


@pytest.fixture
def request_delivery(make_request):
    def _factory(**fields):
        return Delivery(request=make_request(**fields))
    return _factory
