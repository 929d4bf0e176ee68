from printdesk.extensions import db
from printdesk.models import Customer, InventoryItem, Membership


def test_seed_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "seed"])
    second = runner.invoke(args=["system", "seed"])

    assert first.exit_code == 0, first.output
    assert "21 row(s) created" in first.output
    assert "0 row(s) created" in second.output
    assert db.session.query(Customer).count() == 5
    assert db.session.query(InventoryItem).count() == 6
    assert db.session.query(Membership).count() == 3


def test_inventory_stock_lists_highest_first(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=["system", "seed"])

    result = runner.invoke(args=["inventory", "stock"])

    assert result.exit_code == 0
    assert result.output.splitlines()[0].startswith("I00003")


def test_create_membership_rejects_bad_date(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=["system", "seed"])

    result = runner.invoke(args=["memberships", "create", "--customer", "C00002", "--expires", "31-01-2027"])

    assert result.exit_code != 0
    assert db.session.query(Membership).filter_by(customer_id="C00002").count() == 0


def test_reverse_unknown_transaction(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["transactions", "reverse", "T00999"])

    assert result.exit_code == 1
    assert "NotFound" in result.output


def test_list_memberships_shows_seeded_balances(app, db_session):
    runner = app.test_cli_runner()
    runner.invoke(args=["system", "seed"])

    result = runner.invoke(args=["memberships", "list", "--active"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[1].split()[0] == "C00001"
    assert lines[1].split()[-1] == "10000"
    assert len(lines) == 4
