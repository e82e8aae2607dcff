"""
Smart Check-in Command Line Interface.

Commands for database setup, housekeeping and issuing reservations from
the host side.
"""

import asyncio
import sys
from typing import Optional

import click

from smart_checkin import __version__
from smart_checkin.config import settings
from smart_checkin.core.errors import CheckInError


@click.group()
@click.version_option(version=__version__, prog_name="smart-checkin")
def main():
    """Smart Check-in - passkey and secret code check-in for short-term rentals."""
    pass


@main.group()
def db():
    """Database management commands."""
    pass


@db.command("init")
def db_init():
    """Create database tables."""
    from smart_checkin.database import close_db, init_db

    async def run():
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(run())
    except Exception as e:
        click.echo(f"❌ Database initialization failed: {e}")
        sys.exit(1)

    click.echo("✅ Database initialized successfully!")


@main.group()
def challenges():
    """WebAuthn challenge housekeeping."""
    pass


@challenges.command("sweep")
def challenges_sweep():
    """Delete expired WebAuthn challenges."""
    from smart_checkin.database import close_db
    from smart_checkin.tasks.scheduler import run_cleanup_now

    async def run():
        try:
            return await run_cleanup_now()
        finally:
            await close_db()

    try:
        results = asyncio.run(run())
    except Exception as e:
        click.echo(f"❌ Challenge sweep failed: {e}")
        sys.exit(1)

    click.echo(f"🧹 Removed {results['challenges_cleaned']} expired challenges")


@main.group()
def reservations():
    """Reservation management commands."""
    pass


@reservations.command("create")
@click.option("--door-pin", default=None, help="Door unlock code (random 6 digits if omitted)")
def reservations_create(door_pin: Optional[str]):
    """Create a reservation and print its secret code."""
    from smart_checkin.database import AsyncSessionLocal, close_db, init_db
    from smart_checkin.services.reservation_service import ReservationService

    async def run():
        try:
            await init_db()
            async with AsyncSessionLocal() as session:
                reservation = await ReservationService(session).create_reservation(door_pin=door_pin)
                return reservation.id, reservation.secret_code, reservation.door_pin
        finally:
            await close_db()

    try:
        reservation_id, secret_code, pin = asyncio.run(run())
    except CheckInError as e:
        click.echo(f"❌ {e.detail}")
        sys.exit(1)

    click.echo(f"Reservation ID: {reservation_id}")
    click.echo(f"Secret code:    {secret_code}")
    click.echo(f"Door PIN:       {pin}")


@main.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: str, port: int, reload: bool):
    """Start the check-in API server."""
    import uvicorn

    click.echo(f"🚀 Starting Smart Check-in server on {host}:{port}")
    if reload:
        click.echo("🔄 Auto-reload enabled")

    uvicorn.run(
        "smart_checkin.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command()
def config():
    """Show current configuration."""
    click.echo("📋 Smart Check-in Configuration:")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Database URL: {settings.database_url}")
    click.echo(f"Debug Mode: {settings.debug}")
    click.echo(f"WebAuthn RP ID: {settings.rp_id}")
    click.echo(f"WebAuthn RP Name: {settings.rp_name}")
    click.echo(f"WebAuthn Origin: {settings.origin}")
    click.echo(f"Challenge TTL: {settings.challenge_expire_minutes} min")
    click.echo(f"Check-in Token Required: {settings.require_checkin_token}")
    click.echo(f"Background Tasks: {settings.enable_background_tasks}")
    click.echo(f"Cron Secret Set: {bool(settings.cron_secret)}")


@main.command()
def version():
    """Show version information."""
    click.echo(f"Smart Check-in v{__version__}")
    click.echo("Passkey plus secret code self check-in for short-term rentals")


if __name__ == "__main__":
    main()
