#!/usr/bin/env python3
"""
Create an administrator account, or promote an existing user.

Administrators can't be created through the API, so run this once after
the first deployment (and whenever another admin is needed).

Usage:
    python scripts/create_admin.py --email admin@example.com --name "Site Admin" --password "..."
    python scripts/create_admin.py --email author@example.com          # promote existing user
"""

import sys
import argparse
import asyncio
import getpass
import logging
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings  # noqa: E402
from app.database import build_engine, build_session_maker, init_db, close_db  # noqa: E402
from app.services.auth import auth_service  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def run(name: str, email: str, password: str):
    engine = build_engine(settings.database_url)
    await init_db(engine)
    try:
        async with build_session_maker(engine)() as db:
            user = await auth_service.ensure_admin(db, name=name, email=email, password=password)
            logger.info(f"Administrator ready: id={user.id} email={user.email}")
    finally:
        await close_db(engine)


def main():
    parser = argparse.ArgumentParser(description="Create or promote a blog administrator")
    parser.add_argument("--email", required=True, help="Administrator email")
    parser.add_argument("--name", default="Administrator", help="Display name for a new account")
    parser.add_argument("--password", help="Password (prompted when creating a new account)")
    parser.add_argument("--prompt-password", action="store_true", help="Ask for the password interactively")
    args = parser.parse_args()

    password = args.password
    if args.prompt_password and not password:
        password = getpass.getpass("Password: ")

    try:
        asyncio.run(run(args.name, args.email, password))
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
