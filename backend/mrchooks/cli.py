# Overview: Flask CLI command groups for bootstrap and reporting.

# backend/mrchooks/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent: creates missing tables and seeds default settings.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Adds demo products with opening stock (existing product ids are left alone).
#
# Reporting:
# - python -m flask reports daily --date 2026-03-01
#   Print the daily reconciliation as JSON.

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Product, InventoryRecord
from .services import reporting_service
from .services import settings_service
from .services.transactions import commit
from .time_utils import utcnow

DEMO_PRODUCTS = [
    # id, name, price, cost (cents), opening stock
    ("p1", "Whole Roast Chicken", 35000, 24000, 30),
    ("p2", "Half Roast Chicken", 18000, 12500, 20),
    ("p3", "Liempo (per kilo)", 42000, 30000, 10),
    ("p4", "Java Rice", 3000, 1200, 100),
    ("p5", "Gravy Cup", 1500, 500, 100),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create missing tables and seed default settings.

    Safe to run repeatedly: existing rows are never overwritten.
    """
    click.echo("START Initializing Mr. Chooks backend...")
    db.create_all()
    click.echo("PASS Tables ready")

    created = settings_service.seed_defaults(current_app.config["DEFAULT_SETTINGS"])
    if created:
        click.echo(f"PASS Seeded settings: {', '.join(created)}")
    else:
        click.echo("PASS Settings already present")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Add demo products with opening stock."""
    added = []
    now = utcnow()
    for product_id, name, price_cents, cost_cents, stock in DEMO_PRODUCTS:
        if db.session.get(Product, product_id) is not None:
            continue
        product = Product(id=product_id, name=name, price_cents=price_cents, cost_cents=cost_cents)
        product.inventory = InventoryRecord(beginning=stock, stock=stock, updated_at=now)
        db.session.add(product)
        added.append(product_id)
    commit("seed demo products")

    if added:
        click.echo(f"PASS Added demo products: {', '.join(added)}")
    else:
        click.echo("PASS Demo products already present")


@click.group('reports')
def reports_group():
    """Reporting commands."""


@reports_group.command('daily')
@click.option('--date', 'day', type=click.DateTime(formats=["%Y-%m-%d"]), required=True, help='Day to reconcile (YYYY-MM-DD)')
@with_appcontext
def daily_report_cli(day):
    """Print the daily reconciliation for one day as JSON."""
    report = reporting_service.daily_reconciliation(day.date())
    click.echo(json.dumps(report, indent=2))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(reports_group)
