"""
Contract CLI Commands - Management commands for contracts and deliverables.

Provides command-line interface for:
- Creating the database tables
- Locking and closing contracts
- Printing contract summaries and deliverable reports
"""
import json
import logging

import click

from billing_contracts import __version__
from billing_contracts.models import get_db, init_db
from billing_contracts.domain.formatting import format_currency
from billing_contracts.domain.services import ContractService, DeliverableReportService
from billing_contracts.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Billing contracts management commands."""
    pass


@cli.command('init-db')
def init_db_command():
    """Create all database tables."""
    init_db()
    click.echo(click.style("✓ Database initialized", fg='green'))


@cli.command('contract-summary')
@click.argument('contract_id', type=int)
@click.option('--json', 'as_json', is_flag=True, help='Print the summary as JSON')
def contract_summary(contract_id: int, as_json: bool):
    """Show totals, discount and spend for a contract."""
    db = next(get_db())
    try:
        summary = ContractService(db).summary(contract_id)
    except DomainError as e:
        click.echo(click.style(e.message, fg='red'), err=True)
        raise click.Abort()
    finally:
        db.close()

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    click.echo(f"\nContract: {summary.name} (ID: {summary.contract_id})")
    click.echo(f"Status: {summary.status}")
    click.echo(f"Deliverables: {summary.deliverable_count}")
    click.echo(f"  Total:            {format_currency(summary.total_amount)}")
    click.echo(f"  Discount:         {format_currency(summary.discount_amount)}")
    click.echo(f"  After discount:   {format_currency(summary.total_after_discount())}")
    click.echo(f"  Spent:            {format_currency(summary.total_spent)}")
    click.echo(f"  Remaining:        {format_currency(summary.amount_remaining())}")


@cli.command('deliverable-report')
@click.argument('deliverable_id', type=int)
@click.option('--json', 'as_json', is_flag=True, help='Print the report as JSON')
def deliverable_report(deliverable_id: int, as_json: bool):
    """Show spent vs. budgeted hours and cost for a deliverable."""
    db = next(get_db())
    try:
        report = DeliverableReportService(db).build(deliverable_id)
    except DomainError as e:
        click.echo(click.style(e.message, fg='red'), err=True)
        raise click.Abort()
    finally:
        db.close()

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.echo(f"\n{report.title} ({report.type}, {report.status})")
    if report.months != 1:
        click.echo(f"Months: {report.months}")
    click.echo(f"Total:  {format_currency(report.total)}")
    click.echo(f"Budget: {format_currency(report.total_budget())}")
    click.echo(f"Spent:  {format_currency(report.total_spent())}")
    click.echo(f"Profit left: {format_currency(report.profit_left())}")

    if report.activities:
        click.echo("\nActivities:")
        for line in report.activities:
            marker = "billable" if line.billable else "non-billable"
            click.echo(
                f"  {line.name} [{marker}]: {line.hours_spent:g}/{line.hours_budget:g} h, "
                f"{format_currency(line.spent)}/{format_currency(line.budget)}"
            )

    if report.users:
        click.echo("\nUsers:")
        for line in report.users:
            click.echo(
                f"  {line.name}: {line.billable_hours:g} h billable "
                f"({format_currency(line.billable_spent)}), "
                f"{line.non_billable_hours:g} h non-billable "
                f"({format_currency(line.non_billable_spent)})"
            )

    if report.issue_categories:
        click.echo("\nIssue categories:")
        for line in report.issue_categories:
            click.echo(
                f"  {line.name}: {format_currency(line.billable_spent)} billable, "
                f"{format_currency(line.non_billable_spent)} non-billable"
            )


def _change_status(contract_id: int, action: str, past_tense: str) -> None:
    db = next(get_db())
    service = ContractService(db)
    try:
        contract = service.change_status(contract_id, action)
        db.commit()
    except DomainError as e:
        db.rollback()
        click.echo(click.style(f"✗ {e.message}", fg='red'), err=True)
        raise click.Abort()
    finally:
        db.close()

    click.echo(click.style(f"✓ Contract {contract_id} {past_tense}", fg='green'))
    logger.info(f"Contract {contract_id} {past_tense} from the command line")


@cli.command()
@click.argument('contract_id', type=int)
def lock(contract_id: int):
    """Lock a contract; its deliverables can no longer be added or removed."""
    _change_status(contract_id, "lock", "locked")


@cli.command()
@click.argument('contract_id', type=int)
def unlock(contract_id: int):
    """Unlock a locked contract."""
    _change_status(contract_id, "unlock", "unlocked")


@cli.command()
@click.argument('contract_id', type=int)
def close(contract_id: int):
    """Close a contract."""
    _change_status(contract_id, "close", "closed")


@cli.command()
@click.argument('contract_id', type=int)
def reopen(contract_id: int):
    """Reopen a closed contract."""
    _change_status(contract_id, "reopen", "reopened")


@cli.command()
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--host', default='127.0.0.1', help='Server host')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(port: int, host: str, reload: bool):
    """Start the API server with uvicorn."""
    import uvicorn

    click.echo(click.style('Billing Contracts - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")

    uvicorn.run(
        "billing_contracts.main:app",
        host=host,
        port=port,
        reload=reload
    )


def main():
    """Console script entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    cli()


if __name__ == '__main__':
    main()
