# surety_oracle/node.py
"""
FlightSurety Oracle Node
FSO v1

Runs in one asyncio loop:
  - status API (GET /api) on --port
  - oracle bootstrap: REGISTRATION_FEE -> N x registerOracle
  - OracleRequest loop from --from-block, answering matching slots

Usage:
  surety-oracle                          # localhost profile, 25 oracles
  surety-oracle --profile localhost --oracles 10 --on-failure abort
  surety-oracle --no-api                 # oracle loop only
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from surety_oracle import SuretyOracleError
from surety_oracle.config import (
    ABI_PATH,
    API_HOST,
    API_PORT,
    FROM_BLOCK,
    NUM_ORACLES,
    POLL_INTERVAL,
    load_profile,
)
from surety_oracle.context import FailurePolicy, build_context
from surety_oracle.ledger import LedgerClient, load_abi
from surety_oracle.registrar import register_oracles
from surety_oracle.responder import serve_requests
from surety_oracle.server import app

log = logging.getLogger("surety-oracle")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="FlightSurety Oracle Node")
    parser.add_argument("--profile", default=None, help="Network profile (default: $SURETY_PROFILE or localhost)")
    parser.add_argument("--config", default=None, help="Profiles file (default: bundled config.json)")
    parser.add_argument("--abi", default=str(ABI_PATH), help=f"FlightSuretyApp build artifact (default: {ABI_PATH})")
    parser.add_argument("--oracles", type=int, default=NUM_ORACLES, help=f"Oracles to register (default: {NUM_ORACLES})")
    parser.add_argument("--from-block", type=int, default=FROM_BLOCK, help="First block to read OracleRequest events from")
    parser.add_argument("--poll-interval", type=float, default=POLL_INTERVAL, help="Seconds between event polls")
    parser.add_argument(
        "--on-failure",
        choices=[p.value for p in FailurePolicy],
        default=FailurePolicy.CONTINUE.value,
        help="After a failed lookup or submission: continue with the next slot, or abort the request",
    )
    parser.add_argument("--host", default=API_HOST, help=f"Status API host (default: {API_HOST})")
    parser.add_argument("--port", type=int, default=API_PORT, help=f"Status API port (default: {API_PORT})")
    parser.add_argument("--no-api", action="store_true", help="Do not serve the status API")
    args = parser.parse_args(argv)
    if args.oracles < 1:
        parser.error("--oracles must be at least 1")
    return args


async def run_oracles(ctx, args):
    await register_oracles(ctx)
    log.info(f"Listening for OracleRequest events from block {args.from_block}")
    await serve_requests(ctx, ctx.ledger.oracle_requests(args.from_block, args.poll_interval))


async def run_node(args):
    profile = load_profile(args.profile, args.config)
    abi = load_abi(args.abi)
    log.info(f"Profile {profile.name}: {profile.ws_url}, app contract {profile.app_address}")

    ledger = await LedgerClient.open(profile.ws_url, profile.app_address, abi)
    try:
        ctx = await build_context(
            ledger,
            num_oracles=args.oracles,
            failure_policy=FailurePolicy(args.on_failure),
        )
        log.info(f"Default account: {ctx.account}")

        tasks = [run_oracles(ctx, args)]
        if not args.no_api:
            server = uvicorn.Server(uvicorn.Config(app, host=args.host, port=args.port, log_level="info"))
            tasks.append(server.serve())
        await asyncio.gather(*tasks)
    finally:
        await ledger.close()


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    args = parse_args(argv)
    try:
        asyncio.run(run_node(args))
    except SuretyOracleError as e:
        log.error(f"Oracle node stopped: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        log.info("Interrupted")


if __name__ == "__main__":
    main()
