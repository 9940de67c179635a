#!/usr/bin/env python
"""Create the storefront tables and optionally seed defaults.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed-settings
    python scripts/init_db.py --grant-admin <user-id> --email admin@example.com
"""

import asyncio

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from storefront.db.connection import create_engine, create_session_factory  # noqa: E402
from storefront.db.models import Base  # noqa: E402
from storefront.db.seed import grant_role, seed_settings  # noqa: E402
from storefront.main import validate_environment  # noqa: E402


async def init_db(
    *, with_settings: bool, admin_id: str | None, admin_email: str | None, role: str
) -> None:
    engine = create_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    click.echo("✓ Database tables created successfully")

    if with_settings or admin_id:
        async with create_session_factory(engine)() as session:
            if with_settings:
                added = await seed_settings(session)
                click.echo(f"✓ Seeded {len(added)} settings")
            if admin_id:
                user = await grant_role(session, admin_id, role, email=admin_email)
                click.echo(f"✓ {user.email} is now {user.role}")
            await session.commit()

    await engine.dispose()


@click.command()
@click.option("--seed-settings", "with_settings", is_flag=True, help="Insert default admin settings")
@click.option("--grant-admin", "admin_id", default=None, help="User id to promote")
@click.option("--email", "admin_email", default=None, help="Email for a new admin row")
@click.option(
    "--role",
    type=click.Choice(["admin", "super_admin"]),
    default="super_admin",
    show_default=True,
)
def main(with_settings: bool, admin_id: str | None, admin_email: str | None, role: str):
    """Initialize the storefront database."""

    validate_environment()
    asyncio.run(
        init_db(
            with_settings=with_settings,
            admin_id=admin_id,
            admin_email=admin_email,
            role=role,
        )
    )


if __name__ == "__main__":
    main()
