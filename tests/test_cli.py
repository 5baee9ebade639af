"""
Tests for the billing-contracts command line interface.
"""
import json
from datetime import date

import pytest
from click.testing import CliRunner

from billing_contracts.cli import cli
from billing_contracts.models import Contract, FixedDeliverable


@pytest.fixture
def runner(session_factory, monkeypatch):
    """CliRunner whose commands use the per-test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr("billing_contracts.cli.contract_commands.get_db", override_get_db)
    return CliRunner()


@pytest.fixture
def committed_contract(db, contract, make_deliverable, billable_activity, manager, log_time):
    deliverable = make_deliverable(FixedDeliverable, title="Launch", total="$1,500.00")
    log_time(deliverable, billable_activity, manager, hours=2, amount=100)
    ids = (contract.id, deliverable.id)
    db.commit()
    return ids


class TestContractCommands:

    def test_contract_summary(self, runner, committed_contract):
        contract_id, _ = committed_contract

        result = runner.invoke(cli, ['contract-summary', str(contract_id)])

        assert result.exit_code == 0
        assert "Website Redesign" in result.output
        assert "$1,500.00" in result.output
        assert "$1,300.00" in result.output

    def test_contract_summary_json(self, runner, committed_contract):
        contract_id, _ = committed_contract

        result = runner.invoke(cli, ['contract-summary', str(contract_id), '--json'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['total_spent'] == 200.0
        assert data['amount_remaining'] == 1300.0

    def test_missing_contract(self, runner):
        result = runner.invoke(cli, ['contract-summary', '404'])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_lock_and_close(self, runner, session_factory, committed_contract):
        contract_id, _ = committed_contract

        result = runner.invoke(cli, ['lock', str(contract_id)])
        assert result.exit_code == 0
        assert "locked" in result.output

        result = runner.invoke(cli, ['close', str(contract_id)])
        assert result.exit_code == 0

        db = session_factory()
        try:
            assert db.get(Contract, contract_id).status == "closed"
        finally:
            db.close()

    def test_invalid_transition(self, runner, committed_contract):
        contract_id, _ = committed_contract

        result = runner.invoke(cli, ['unlock', str(contract_id)])

        assert result.exit_code == 1
        assert "cannot move from 'open'" in result.output

    def test_reopen(self, runner, committed_contract):
        contract_id, _ = committed_contract
        runner.invoke(cli, ['close', str(contract_id)])

        result = runner.invoke(cli, ['reopen', str(contract_id)])

        assert result.exit_code == 0
        assert "reopened" in result.output


class TestDeliverableReportCommand:

    def test_report(self, runner, committed_contract):
        _, deliverable_id = committed_contract

        result = runner.invoke(cli, ['deliverable-report', str(deliverable_id)])

        assert result.exit_code == 0
        assert "Launch (FixedDeliverable, open)" in result.output
        assert "Development [billable]" in result.output
        assert "Mary Manager" in result.output

    def test_report_json(self, runner, committed_contract):
        _, deliverable_id = committed_contract

        result = runner.invoke(cli, ['deliverable-report', str(deliverable_id), '--json'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['labor_spent'] == 200.0
        assert data['profit_left'] == 1300.0

    def test_missing_deliverable(self, runner):
        result = runner.invoke(cli, ['deliverable-report', '404'])
        assert result.exit_code == 1


def test_init_db(runner, monkeypatch):
    called = []
    monkeypatch.setattr(
        "billing_contracts.cli.contract_commands.init_db", lambda: called.append(True)
    )

    result = runner.invoke(cli, ['init-db'])

    assert result.exit_code == 0
    assert called == [True]
    assert "Database initialized" in result.output
