# surety_oracle/responder.py
"""
FlightSurety Oracle — Request Responder
FSO v1

For each OracleRequest delivery:
  1. Error delivery -> log it, submit nothing
  2. For every slot 0..N-1, in order:
       getMyIndexes(slot) contains request.index ?
         -> submitOracleResponse with a random status code

Each remote call is awaited before the next one starts. Failed calls do
not raise: they become a failed CallResult handed to the failure handler,
and ctx.failure_policy decides whether the remaining slots still run.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from surety_oracle import LedgerError
from surety_oracle.context import FailurePolicy
from surety_oracle.statuses import random_status_code, status_label

log = logging.getLogger("surety-responder")

LOOKUP = "lookup"
SUBMIT = "submit"


@dataclass(frozen=True)
class CallResult:
    slot: int
    operation: str
    ok: bool
    reason: Optional[str] = None
    status_code: Optional[int] = None
    tx_hash: Optional[str] = None


def log_failure(request, result):
    log.error(
        f"Oracle slot {result.slot} {result.operation} failed for "
        f"index={request.index} flight={request.flight}: {result.reason}"
    )


async def respond_to_request(ctx, request, on_failure=log_failure):
    """Answer one request from every matching slot. Returns the CallResults."""
    results = []
    for slot in range(ctx.num_oracles):
        try:
            indexes = await ctx.ledger.get_my_indexes(slot, ctx.account)
        except LedgerError as e:
            result = CallResult(slot=slot, operation=LOOKUP, ok=False, reason=str(e))
        else:
            if request.index not in indexes:
                continue
            result = await _submit(ctx, slot, request)

        results.append(result)
        if result.ok:
            continue
        on_failure(request, result)
        if ctx.failure_policy == FailurePolicy.ABORT:
            log.warning(f"Abandoning remaining slots for index={request.index} flight={request.flight}")
            break
    return results


async def _submit(ctx, slot, request):
    code = random_status_code(ctx.rng)
    try:
        tx = await ctx.ledger.submit_oracle_response(request, code, ctx.account, ctx.response_gas)
    except LedgerError as e:
        return CallResult(slot=slot, operation=SUBMIT, ok=False, reason=str(e), status_code=code)
    log.info(
        f"Slot {slot} answered index={request.index} {request.airline} {request.flight} "
        f"@{request.timestamp}: {code} {status_label(code)} tx={tx}"
    )
    return CallResult(slot=slot, operation=SUBMIT, ok=True, status_code=code, tx_hash=tx)


async def serve_requests(ctx, deliveries, on_failure=log_failure):
    """Consume deliveries one at a time until the stream ends."""
    async for delivery in deliveries:
        if not delivery.ok:
            log.error(f"OracleRequest delivery error: {delivery.error}")
            continue
        request = delivery.request
        log.info(
            f"OracleRequest index={request.index} airline={request.airline} "
            f"flight={request.flight} timestamp={request.timestamp}"
        )
        await respond_to_request(ctx, request, on_failure)
