# Overview: Flask CLI command groups for schema reset, promotion inspection, and voucher/basket maintenance.

# backend/promo_basket/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Promotions:
# - python -m flask promotions list [--all]
#   List promotions with type, voucher and free-goods articles.
#
# Vouchers:
# - python -m flask vouchers generate-codes --voucher-id 3 --count 50 [--prefix SUMMER-]
#   Create individual single-use codes for a mode 1 voucher.
#
# Basket maintenance:
# - python -m flask basket purge-session --session-id abc123
#   Delete the basket lines and stored session values of a shopper session.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Promotion
from .services import basket_service, voucher_service


@click.group('system')
def system_group():
    """System bootstrap and repair."""


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

    click.echo("PASS Database reset complete.")


@click.group('promotions')
def promotions_group():
    """Promotion inspection."""


@promotions_group.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Show inactive promotions too')
@with_appcontext
def list_promotions_cli(show_all):
    """
    List promotions.

    Example:
        flask promotions list
        flask promotions list --all
    """
    query = db.session.query(Promotion)
    if not show_all:
        query = query.filter_by(is_active=True)
    promotions = query.order_by(Promotion.id).all()

    if not promotions:
        click.echo("No promotions found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Name':<30} {'Type':<18} {'Shop':<6} {'Voucher':<8} {'Active':<8} {'Free goods'}")
    click.echo("="*100)

    for promo in promotions:
        active_str = "Yes" if promo.is_active else "No"
        free_goods = ", ".join(str(fg.article_id) for fg in promo.free_goods) or "-"
        click.echo(
            f"{promo.id:<5} {promo.name[:30]:<30} {promo.promo_type:<18} {promo.shop_id or 'all':<6} "
            f"{promo.voucher_id or '-':<8} {active_str:<8} {free_goods}"
        )

    click.echo("="*100 + "\n")


@click.group('vouchers')
def vouchers_group():
    """Voucher code management."""


@vouchers_group.command('generate-codes')
@click.option('--voucher-id', type=int, required=True, help='Voucher ID (mode 1)')
@click.option('--count', type=int, default=10, show_default=True, help='Number of codes')
@click.option('--prefix', default='', help='Prefix put in front of every code')
@with_appcontext
def generate_codes_cli(voucher_id, count, prefix):
    """Generate individual single-use codes for a voucher."""
    try:
        codes = voucher_service.generate_codes(voucher_id, count, prefix)
    except voucher_service.VoucherCodeError as e:
        click.echo(f"FAIL {str(e)}")
        return

    for code in codes:
        click.echo(code)
    click.echo(f"PASS Generated {len(codes)} codes for voucher {voucher_id}")


@click.group('basket')
def basket_group():
    """Shopper basket maintenance."""


@basket_group.command('purge-session')
@click.option('--session-id', required=True, help='Shopper session ID')
@with_appcontext
def purge_session_cli(session_id):
    """Delete the basket and session values of one shopper session."""
    deleted = basket_service.purge_session(session_id)
    click.echo(f"PASS Removed {deleted} basket lines for session {session_id}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(promotions_group)
    app.cli.add_command(vouchers_group)
    app.cli.add_command(basket_group)
