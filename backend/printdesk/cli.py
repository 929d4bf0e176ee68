# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/printdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to printdesk (PowerShell: $env:FLASK_APP="printdesk").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (no-op for tables that already exist).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Idempotent sample data: staff, customers, printers, inventory, memberships.
#
# Memberships:
# - python -m flask memberships create --customer C00002 --expires 2027-01-31 [--points 0]
# - python -m flask memberships list [--active]
#
# Transactions:
# - python -m flask transactions list --limit 20
# - python -m flask transactions reverse T00001
#   Delete a transaction and restore the stock it consumed.
#
# Inventory:
# - python -m flask inventory stock
#   Items ordered by stock, highest first.

import click
from datetime import timedelta
from decimal import Decimal
from flask.cli import with_appcontext

from .errors import PostingError
from .extensions import db
from .models import Customer, InventoryItem, Membership, Printer, Staff
from .services import stock_ledger, transaction_service
from .time_utils import parse_iso_date, today


SAMPLE_STAFF = [
    ("S00001", "Dzaky Indomie", "081234567890", "Jl. Stasiun Lempuyangan No. 10, Jakarta", "M"),
    ("S00002", "Bima Rakagooning", "081298765432", "Jl. Ngawi Utara No. 25, Bandung", "M"),
    ("S00003", "Reynard Saputra", "081211223344", "Jl. Asia Afrika No. 5, Surabaya", "M"),
]

SAMPLE_CUSTOMERS = [
    ("C00001", "Ahmad Suki", "081111111111"),
    ("C00002", "Faiz Rungkut", "081222222222"),
    ("C00003", "Chisato Nishikigi", "081333333333"),
    ("C00004", "Mister Javascript", "081444444444"),
    ("C00005", "Kurosawa Karbito", "081555555555"),
]

SAMPLE_PRINTERS = [
    ("P00001", True, "Excellent"),
    ("P00002", True, "Good"),
    ("P00003", False, "Needs Ink Cartridge Replacement"),
    ("P00004", True, "Good"),
]

SAMPLE_INVENTORY = [
    ("I00001", "Black Ink Cartridge XL", 50, "150000.00"),
    ("I00002", "Color Ink Cartridge XL", 45, "180000.00"),
    ("I00003", "A4 Printer Paper (500 sheets)", 100, "50000.00"),
    ("I00004", "USB Printer Cable (2m)", 30, "25000.00"),
    ("I00005", "Printer Cleaning Kit", 20, "75000.00"),
    ("I00006", "Photo Paper (Glossy, 100 sheets)", 15, "60000.00"),
]

# (customer, days until expiry, points)
SAMPLE_MEMBERSHIPS = [
    ("C00001", 365, 10000),
    ("C00003", 180, 5000),
    ("C00005", 90, 7500),
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' for sample data.")


@system_group.command('seed')
@with_appcontext
def seed_data():
    """Insert sample staff, customers, printers, inventory and memberships (skips existing rows)."""
    created = 0

    for s_id, name, phone, address, gender in SAMPLE_STAFF:
        if db.session.get(Staff, s_id) is None:
            db.session.add(Staff(id=s_id, name=name, phone=phone, address=address, gender=gender))
            created += 1

    for c_id, name, phone in SAMPLE_CUSTOMERS:
        if db.session.get(Customer, c_id) is None:
            db.session.add(Customer(id=c_id, name=name, phone=phone))
            created += 1

    for p_id, is_operational, condition in SAMPLE_PRINTERS:
        if db.session.get(Printer, p_id) is None:
            db.session.add(Printer(id=p_id, is_operational=is_operational, condition=condition))
            created += 1

    for i_id, name, stock, price in SAMPLE_INVENTORY:
        if db.session.get(InventoryItem, i_id) is None:
            db.session.add(InventoryItem(id=i_id, name=name, stock=stock, unit_price=Decimal(price)))
            created += 1

    db.session.flush()

    for c_id, days, points in SAMPLE_MEMBERSHIPS:
        if db.session.query(Membership).filter_by(customer_id=c_id).first() is None:
            db.session.add(Membership(customer_id=c_id, expires_on=today() + timedelta(days=days), points=points))
            created += 1

    db.session.commit()
    click.echo(f"PASS Seed complete: {created} row(s) created.")


@click.group('memberships')
def memberships_group():
    """Membership management."""


@memberships_group.command('create')
@click.option('--customer', 'customer_id', required=True, help='Customer ID (C#####)')
@click.option('--expires', required=True, help='Expiry date (YYYY-MM-DD)')
@click.option('--points', default=0, type=click.IntRange(min=0), help='Opening points balance')
@with_appcontext
def create_membership(customer_id, expires, points):
    """Create a membership for a customer."""
    try:
        expires_on = parse_iso_date(expires)
    except ValueError:
        raise click.BadParameter("must be YYYY-MM-DD", param_hint="--expires")
    if expires_on is None:
        raise click.BadParameter("must be YYYY-MM-DD", param_hint="--expires")

    if db.session.get(Customer, customer_id) is None:
        raise click.ClickException(f"Customer {customer_id} not found")
    if db.session.query(Membership).filter_by(customer_id=customer_id).first() is not None:
        raise click.ClickException(f"Customer {customer_id} already has a membership")

    membership = Membership(customer_id=customer_id, expires_on=expires_on, points=points)
    db.session.add(membership)
    db.session.commit()
    click.echo(f"PASS Created membership {membership.id} for {customer_id} (expires {expires_on.isoformat()})")


@memberships_group.command('list')
@click.option('--active', 'active_only', is_flag=True, help='Only memberships that have not expired')
@with_appcontext
def list_memberships(active_only):
    """
    List memberships.

    Example:
        flask memberships list
        flask memberships list --active
    """
    query = db.session.query(Membership).join(Customer)
    if active_only:
        query = query.filter(Membership.expires_on >= today())

    memberships = query.order_by(Membership.customer_id).all()
    if not memberships:
        click.echo("No memberships found.")
        return

    click.echo(f"{'Customer':<10} {'Name':<25} {'Expires':<12} {'Points':>8}")
    for m in memberships:
        row = m.to_dict()
        click.echo(f"{row['customer_id']:<10} {m.customer.name:<25} {row['expires_on']:<12} {row['points']:>8}")


@click.group('transactions')
def transactions_group():
    """Transaction inspection and reversal."""


@transactions_group.command('list')
@click.option('--limit', default=20, type=click.IntRange(1, 100), help='Number of rows')
@with_appcontext
def list_transactions_cli(limit):
    """Most recent transactions first."""
    try:
        rows, total = transaction_service.list_transactions(limit=limit)
    except PostingError as e:
        raise click.ClickException(str(e))

    click.echo(f"{'ID':<8} {'Customer':<10} {'Total':>14} {'Method':<10} {'Occurred'}")
    for t in rows:
        click.echo(f"{t.id:<8} {t.customer_id:<10} {str(t.total_price):>14} {t.payment_method or '':<10} {t.occurred_at}")
    click.echo(f"{len(rows)} of {total} transaction(s)")


@transactions_group.command('reverse')
@click.argument('transaction_id')
@with_appcontext
def reverse_transaction_cli(transaction_id):
    """Delete a transaction and restore its inventory stock."""
    try:
        result = transaction_service.reverse_transaction(transaction_id)
    except PostingError as e:
        raise click.ClickException(f"{e.kind}: {e}")

    for line in result.restored:
        click.echo(f"PASS Restored {line['quantity']} x {line['item_id']}")
    for line in result.failed:
        click.echo(f"WARN Could not restore {line['quantity']} x {line['item_id']}: {line['reason']}")
    click.echo(f"PASS Transaction {transaction_id} deleted")


@click.group('inventory')
def inventory_group():
    """Inventory reports."""


@inventory_group.command('stock')
@with_appcontext
def stock_cli():
    """Items ordered by stock, highest first."""
    for item in stock_ledger.stock_report():
        click.echo(f"{item.id:<8} {item.name:<35} {item.stock:>6}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(memberships_group)
    app.cli.add_command(transactions_group)
    app.cli.add_command(inventory_group)
