"""
Contacts service CLI.

Commands:
    serve     - Start the HTTP listener (and HTTPS when the certificate loads)
    init-db   - Create the contacts table, optionally resetting and seeding it

Usage:
    contacts serve
    contacts init-db --reset --seed
"""

import asyncio
import logging
import sys

import click

from src.config import Settings
from src.db import Store
from src.errors import StorageError, StoreInitError
from src.schemas import ContactFields
from src.services.contacts import ContactService

SAMPLE_CONTACTS = [
    {
        "firstname": "John",
        "lastname": "Doe",
        "email": "john.doe@example.com",
        "homephone": "01-234-5678",
        "mobile": "087-1234567",
        "address": "123 Main St, Dublin, Ireland",
        "birthday": "1985-03-15",
    },
    {
        "firstname": "Jane",
        "lastname": "Smith",
        "email": "jane.smith@example.com",
        "homephone": "01-876-5432",
        "mobile": "086-7654321",
        "address": "456 High Street, Cork, Ireland",
        "birthday": "1990-07-22",
    },
    {
        "firstname": "Michael",
        "lastname": "Johnson",
        "email": "michael.johnson@example.com",
        "homephone": "01-555-1234",
        "mobile": "085-5551234",
        "address": "789 Park Lane, Galway, Ireland",
        "birthday": "1982-11-05",
    },
    {
        "firstname": "Emma",
        "lastname": "Williams",
        "email": "emma.williams@example.com",
        "homephone": "01-444-9876",
        "mobile": "083-4449876",
        "address": "101 River Road, Limerick, Ireland",
        "birthday": "1988-04-30",
    },
    {
        "firstname": "David",
        "lastname": "Brown",
        "email": "david.brown@example.com",
        "homephone": "01-333-6789",
        "mobile": "089-3336789",
        "address": "202 Mountain View, Waterford, Ireland",
        "birthday": "1995-09-12",
    },
]


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


async def _init_db(store: Store, reset: bool, seed: bool) -> int:
    try:
        if reset:
            await store.reset()
        await store.initialize()
        service = ContactService(store)
        if seed:
            for contact in SAMPLE_CONTACTS:
                await service.create(ContactFields(**contact))
        return len(await service.list())
    finally:
        await store.dispose()


@click.group()
@click.version_option(version="1.0.0", prog_name="contacts")
def cli():
    """Contacts API service."""
    pass


@cli.command("serve")
def serve_command():
    """Start the contacts API listeners."""
    from src.server import serve

    settings = Settings.from_env()
    _configure_logging(settings)
    try:
        serve(settings)
    except StoreInitError as e:
        click.secho(f"Failed to initialize database: {e}", fg="red", err=True)
        sys.exit(1)


@cli.command("init-db")
@click.option("--reset", is_flag=True, help="Drop the contacts table before creating it")
@click.option("--seed", is_flag=True, help="Insert sample contacts")
def init_db_command(reset, seed):
    """Create the contacts table."""
    settings = Settings.from_env()
    _configure_logging(settings)
    store = Store(settings.database_url)

    try:
        count = asyncio.run(_init_db(store, reset, seed))
    except (StoreInitError, StorageError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Database ready at {settings.database_url} ({count} contacts)")


if __name__ == "__main__":
    cli()
