# surety_oracle/ledger.py
"""
FlightSurety Oracle — Ledger Client
FSO v1

Async wrapper around the FlightSuretyApp contract over a WebSocket
connection. This is the only module that talks to the ledger.

Contract surface used:
  REGISTRATION_FEE()                                   query
  registerOracle()                                     payable tx
  getMyIndexes(slot)                                   query
  submitOracleResponse(index, airline, flight, ts, s)  tx
  OracleRequest(index, airline, flight, timestamp)     event

Every web3 failure, and every mined-but-reverted receipt, surfaces as
LedgerError.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from eth_utils import event_abi_to_log_topic
from web3 import AsyncWeb3, Web3, WebSocketProvider
from web3.exceptions import Web3Exception
from websockets.exceptions import WebSocketException

from surety_oracle import ConfigError, LedgerError
from surety_oracle.config import FROM_BLOCK, POLL_INTERVAL

log = logging.getLogger("surety-ledger")

# WebSocketProvider lets a dropped socket surface as websockets.ConnectionClosed
LEDGER_FAILURES = (Web3Exception, WebSocketException, OSError, asyncio.TimeoutError)


@dataclass(frozen=True)
class OracleRequest:
    index: int
    airline: str
    flight: str
    timestamp: int
    block_number: Optional[int] = None

    @classmethod
    def from_log(cls, entry):
        args = entry["args"]
        return cls(
            index=int(args["index"]),
            airline=args["airline"],
            flight=args["flight"],
            timestamp=int(args["timestamp"]),
            block_number=entry.get("blockNumber"),
        )


@dataclass(frozen=True)
class Delivery:
    """One item of the OracleRequest stream: a request or an error, never both."""
    request: Optional[OracleRequest] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_abi(path):
    """Read the ABI from a Truffle build artifact, or a bare ABI list."""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"Contract artifact not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Contract artifact {path} is not valid JSON: {e}")

    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ConfigError(f"No ABI list in {path}")
    return data


def event_topic(abi, name):
    """topic0 of the named event, e.g. keccak("OracleRequest(uint8,address,string,uint256)")."""
    for item in abi:
        if item.get("type") == "event" and item.get("name") == name:
            return Web3.to_hex(event_abi_to_log_topic(item))
    raise ConfigError(f"Contract ABI has no {name} event")


class LedgerClient:
    def __init__(self, w3, contract):
        self.w3 = w3
        self.contract = contract

    @classmethod
    async def open(cls, url, address, abi):
        try:
            address = Web3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid contract address {address!r}: {e}") from e

        w3 = AsyncWeb3(WebSocketProvider(url))
        try:
            await w3.provider.connect()
        except LEDGER_FAILURES as e:
            raise LedgerError(f"Cannot connect to ledger at {url}: {e}") from e
        try:
            contract = w3.eth.contract(address=address, abi=abi)
        except (Web3Exception, ValueError, TypeError) as e:
            await w3.provider.disconnect()
            raise LedgerError(f"Cannot bind FlightSuretyApp at {address}: {e}") from e
        log.info(f"Connected to {url}, FlightSuretyApp at {contract.address}")
        return cls(w3, contract)

    async def close(self):
        await self.w3.provider.disconnect()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _guard(self, what, make):
        try:
            return await make()
        except LEDGER_FAILURES as e:
            raise LedgerError(f"{what} failed: {e}") from e

    async def _send(self, what, fn, tx):
        tx_hash = await self._guard(what, lambda: fn.transact(tx))
        receipt = await self._guard(
            f"{what} receipt", lambda: self.w3.eth.wait_for_transaction_receipt(tx_hash)
        )
        if receipt["status"] != 1:
            raise LedgerError(f"{what} reverted in tx {Web3.to_hex(tx_hash)}")
        return Web3.to_hex(tx_hash)

    # ── Queries ───────────────────────────────────────────────────────────────

    async def accounts(self):
        return list(await self._guard("eth_accounts", lambda: self.w3.eth.accounts))

    async def registration_fee(self) -> int:
        fee = await self._guard(
            "REGISTRATION_FEE", lambda: self.contract.functions.REGISTRATION_FEE().call()
        )
        return int(fee)

    async def get_my_indexes(self, slot, sender):
        indexes = await self._guard(
            f"getMyIndexes({slot})",
            lambda: self.contract.functions.getMyIndexes(slot).call({"from": sender}),
        )
        return [int(i) for i in indexes]

    # ── Transactions ──────────────────────────────────────────────────────────

    async def register_oracle(self, sender, fee, gas):
        fn = self.contract.functions.registerOracle()
        return await self._send("registerOracle", fn, {"from": sender, "value": fee, "gas": gas})

    async def submit_oracle_response(self, request, status_code, sender, gas):
        fn = self.contract.functions.submitOracleResponse(
            request.index,
            request.airline,
            request.flight,
            request.timestamp,
            status_code,
        )
        return await self._send("submitOracleResponse", fn, {"from": sender, "gas": gas})

    # ── Events ────────────────────────────────────────────────────────────────

    async def oracle_requests(self, from_block=FROM_BLOCK, poll_interval=POLL_INTERVAL):
        """
        Yield a Delivery per OracleRequest log, oldest first, forever.

        New block ranges are polled for raw logs with eth_getLogs. A failed
        poll yields an error Delivery and the same range is polled again
        next round. Logs are decoded one by one after the range is
        consumed, so an undecodable log becomes its own error Delivery and
        never holds back the ones after it.
        """
        next_block = from_block
        event = self.contract.events.OracleRequest()
        topic = event_topic(self.contract.abi, "OracleRequest")
        while True:
            try:
                head = await self.w3.eth.block_number
                entries = []
                if head >= next_block:
                    entries = await self.w3.eth.get_logs({
                        "address": self.contract.address,
                        "fromBlock": next_block,
                        "toBlock": head,
                        "topics": [topic],
                    })
            except LEDGER_FAILURES as e:
                yield Delivery(error=LedgerError(f"OracleRequest poll from block {next_block} failed: {e}"))
            else:
                if head >= next_block:
                    next_block = head + 1
                for entry in entries:
                    try:
                        request = OracleRequest.from_log(event.process_log(entry))
                    except (Web3Exception, KeyError, TypeError, ValueError) as e:
                        yield Delivery(error=LedgerError(f"Undecodable OracleRequest log: {e!r}"))
                        continue
                    yield Delivery(request=request)
            await asyncio.sleep(poll_interval)
