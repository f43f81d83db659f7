"""
CLI integration tests using Click's test runner.

Tests verify that the CLI commands work end-to-end via the Click
CliRunner, with the RPC transport replaced by an in-memory stub.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from stellar_sdk import Keypair

from slender.cli import cli
from slender.identity.keys import save_secret
from slender.scval import I128, Symbol, U32


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def slender_home(tmp_path: Path):
    """Temporary ~/.slender with a clean process environment."""
    home = tmp_path / ".slender"
    home.mkdir()
    env_path = home / ".env"
    with patch.dict(os.environ, {"SLENDER_POLL_INTERVAL": "0"}, clear=True):
        with patch("slender.identity.keys.SLENDER_ENV", env_path):
            with patch("slender.commands.common.SLENDER_ENV", env_path):
                yield home


@pytest.fixture()
def identity(slender_home: Path) -> Keypair:
    keypair = Keypair.random()
    save_secret(keypair.secret, "ADMIN_SECRET", slender_home / ".env")
    return keypair


@pytest.fixture()
def stub_rpc(make_rpc):
    """Install a FakeRpc as the transport of every ContractClient."""

    def install(**kwargs):
        rpc = make_rpc(**kwargs)
        patcher = patch("slender.soroban.client.SorobanRpc", return_value=rpc)
        patcher.start()
        return rpc

    yield install
    patch.stopall()


class TestVersionAndInfo:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.4.0" in result.output

    def test_banner(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "S L E N D E R" in result.output
        assert "call" in result.output

    def test_info(self, runner: CliRunner, identity: Keypair) -> None:
        result = runner.invoke(cli, ["info"])
        assert result.exit_code == 0
        assert identity.public_key in result.output
        assert "simulated" in result.output


class TestWhoami:
    def test_with_identity(self, runner: CliRunner, identity: Keypair) -> None:
        result = runner.invoke(cli, ["whoami"])
        assert result.exit_code == 0
        assert identity.public_key in result.output

    def test_without_identity(self, runner: CliRunner, slender_home: Path) -> None:
        result = runner.invoke(cli, ["whoami"])
        assert result.exit_code == 1
        assert "slender register" in result.output


class TestCall:
    def test_success(self, runner, identity, stub_rpc, contract_id) -> None:
        rpc = stub_rpc()
        args = json.dumps([{"address": identity.public_key}, {"i128": "100000000000"}])
        result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint", "--args", args])
        assert result.exit_code == 0, result.output
        assert "SUCCESS" in result.output
        assert '{"void": null}' in result.output
        assert rpc.count("sendTransaction") == 1

    def test_invalid_args(self, runner, identity, contract_id) -> None:
        result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint", "--args", "{"])
        assert result.exit_code == 1
        assert "Invalid args" in result.output

    def test_missing_identity(self, runner, slender_home, contract_id) -> None:
        result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint"])
        assert result.exit_code == 2
        assert "ADMIN_SECRET" in result.output

    def test_simulation_error(self, runner, identity, stub_rpc, contract_id) -> None:
        rpc = stub_rpc(simulation={"error": "HostError: Error(Contract, #2)"})
        result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint"])
        assert result.exit_code == 5
        assert "Error(Contract, #2)" in result.output
        assert rpc.count("sendTransaction") == 0

    def test_failed(self, runner, identity, stub_rpc, contract_id) -> None:
        stub_rpc(send=[{"status": "ERROR"}])
        result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint", "--retries", "2"])
        assert result.exit_code == 6
        assert "Attempts: 2" in result.output

    def test_timed_out(self, runner, identity, stub_rpc, contract_id) -> None:
        stub_rpc(statuses=[{"status": "NOT_FOUND"}])
        with patch.dict(os.environ, {"SLENDER_POLL_ATTEMPTS": "3"}):
            result = runner.invoke(cli, ["call", "--contract", contract_id, "--method", "mint"])
        assert result.exit_code == 7
        assert "Polls: 3" in result.output

    def test_budget_label(self, runner, identity, stub_rpc, contract_id, tmp_path) -> None:
        stub_rpc()
        budget_file = tmp_path / "budget.ndjson"
        with patch.dict(os.environ, {"SLENDER_BUDGET_FILE": str(budget_file)}):
            result = runner.invoke(
                cli,
                ["call", "--contract", contract_id, "--method", "mint", "--budget-label", "mint_xlm"],
            )
            assert result.exit_code == 0, result.output

            shown = runner.invoke(cli, ["budget", "show"])
        assert "mint_xlm: mint" in shown.output


class TestQuery:
    def test_prints_value(self, runner, slender_home, stub_rpc, make_simulation, contract_id) -> None:
        stub_rpc(simulation=make_simulation(return_value=I128(-1)))
        result = runner.invoke(cli, ["query", "--contract", contract_id, "--method", "balance"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"i128": "-1"}


class TestHealth:
    def test_healthy(self, runner, slender_home, stub_rpc) -> None:
        stub_rpc()
        result = runner.invoke(cli, ["health"])
        assert result.exit_code == 0
        assert "HEALTHY" in result.output
        assert "4321" in result.output

    def test_unhealthy(self, runner, slender_home, stub_rpc) -> None:
        stub_rpc(health="unhealthy")
        result = runner.invoke(cli, ["health", "--rpc-url", "http://down.test/rpc"])
        assert result.exit_code == 4
        assert "http://down.test/rpc" in result.output


class TestStorage:
    def test_dump(self, runner, slender_home, stub_rpc, contract_id, instance_entry) -> None:
        stub_rpc(entries=[instance_entry(contract_id, [(Symbol("Paused"), U32(0))])])
        result = runner.invoke(cli, ["storage", "--contract", contract_id])
        assert result.exit_code == 0, result.output
        assert '{"symbol": "Paused"} = {"u32": "0"}' in result.output

    def test_missing_contract(self, runner, slender_home, stub_rpc, contract_id) -> None:
        stub_rpc()
        result = runner.invoke(cli, ["storage", "--contract", contract_id])
        assert result.exit_code == 2


class TestRegister:
    def test_creates_and_funds(self, runner, slender_home, stub_rpc) -> None:
        rpc = stub_rpc(sequence=55)
        result = runner.invoke(cli, ["register"])
        assert result.exit_code == 0, result.output
        assert "Created identity ADMIN_SECRET" in result.output
        assert "sequence 55" in result.output
        assert "ADMIN_SECRET=S" in (slender_home / ".env").read_text(encoding="utf-8")
        assert rpc.count("friendbot") == 1

    def test_reuses_identity(self, runner, identity) -> None:
        result = runner.invoke(cli, ["register", "--skip-fund"])
        assert result.exit_code == 0
        assert "Using existing identity" in result.output
        assert identity.public_key in result.output


class TestBudget:
    def test_empty(self, runner, tmp_path) -> None:
        result = runner.invoke(cli, ["budget", "show", "--file", str(tmp_path / "none.ndjson")])
        assert result.exit_code == 0
        assert "No budget snapshots" in result.output

    def test_clear(self, runner, tmp_path) -> None:
        path = tmp_path / "budget.ndjson"
        path.write_text('{"label": "x"}\n', encoding="utf-8")
        result = runner.invoke(cli, ["budget", "clear", "--file", str(path)])
        assert result.exit_code == 0
        assert not path.exists()
