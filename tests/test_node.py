from unittest.mock import AsyncMock

import pytest

from surety_oracle.config import API_PORT, NUM_ORACLES
from surety_oracle.context import FailurePolicy
from surety_oracle.node import main, parse_args, run_node

from conftest import OWNER


@pytest.fixture
def patched_ledger(monkeypatch):
    monkeypatch.delenv("SURETY_PROFILE", raising=False)

    def _install(ledger):
        opener = AsyncMock(return_value=ledger)
        monkeypatch.setattr("surety_oracle.node.LedgerClient.open", opener)
        monkeypatch.setattr("surety_oracle.node.load_abi", lambda path: [])
        return opener
    return _install


def test_defaults():
    args = parse_args([])

    assert args.oracles == NUM_ORACLES
    assert args.from_block == 0
    assert args.port == API_PORT
    assert args.on_failure == FailurePolicy.CONTINUE.value
    assert not args.no_api


def test_rejects_empty_oracle_pool():
    with pytest.raises(SystemExit):
        parse_args(["--oracles", "0"])


@pytest.mark.asyncio
async def test_run_node_registers_then_answers(make_ledger, request_delivery, patched_ledger):
    ledger = make_ledger(indexes={1: [2]}, deliveries=[request_delivery(index=2)])
    opener = patched_ledger(ledger)
    args = parse_args(["--no-api", "--oracles", "3", "--from-block", "12", "--poll-interval", "0.5"])

    await run_node(args)

    opener.assert_awaited_once()
    url, address, abi = opener.call_args[0]
    assert url == "ws://localhost:9545"
    assert abi == []
    assert len(ledger.registrations) == 3
    assert ledger.streams == [(12, 0.5)]
    assert [(s["slot"], s["from"]) for s in ledger.submissions] == [(1, OWNER)]
    assert ledger.closed


def test_main_exits_when_registration_fails(make_ledger, patched_ledger):
    ledger = make_ledger(reject_registrations={0})
    patched_ledger(ledger)

    with pytest.raises(SystemExit) as exc:
        main(["--no-api", "--oracles", "2"])

    assert exc.value.code == 1
    assert ledger.closed
    assert ledger.submissions == []


def test_main_exits_cleanly_on_invalid_contract_address(tmp_path, make_ledger, patched_ledger, caplog):
    path = tmp_path / "config.json"
    path.write_text('{"localhost": {"url": "http://localhost:9545", "appAddress": "0x01"}}')
    opener = patched_ledger(make_ledger())

    with pytest.raises(SystemExit) as exc:
        main(["--no-api", "--config", str(path)])

    assert exc.value.code == 1
    opener.assert_not_awaited()
    assert "Oracle node stopped: Profile 'localhost' has an invalid appAddress" in caplog.text
