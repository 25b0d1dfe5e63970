# surety_oracle/registrar.py
"""
Oracle bootstrap: read the registration fee once, then register
ctx.num_oracles oracles from the default account, one at a time.

Nothing here is retried. The first failing call raises LedgerError and
startup stops.
"""

import logging

log = logging.getLogger("surety-registrar")


async def register_oracles(ctx):
    fee = await ctx.ledger.registration_fee()
    log.info(f"Registration fee: {fee} wei, registering {ctx.num_oracles} oracles from {ctx.account}")

    tx_hashes = []
    for slot in range(ctx.num_oracles):
        tx = await ctx.ledger.register_oracle(ctx.account, fee, ctx.registration_gas)
        log.info(f"Registered oracle {slot + 1}/{ctx.num_oracles}: tx={tx}")
        tx_hashes.append(tx)
    return tx_hashes
