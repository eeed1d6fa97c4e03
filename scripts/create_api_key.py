#!/usr/bin/env python3
"""Create a partner API key from the command line.

Used to bootstrap the first admin key, since the admin endpoints already
require one:

    python scripts/create_api_key.py ops "Operations" --scope admin
"""

import argparse
import asyncio
import sys

import logfire

from idp.config import Settings
from idp.domain.error import DomainError
from idp.domain.service import ApiKeyService
from idp.util.di.container import create_container
from idp.util.observability import configure_logfire


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("partner_key", help="Partner slug (lowercase, digits, hyphens)")
    parser.add_argument("partner_name", help="Display name")
    parser.add_argument(
        "--scope", action="append", dest="scopes", default=[], help="Repeatable"
    )
    parser.add_argument(
        "--allowed-ip", action="append", dest="allowed_ips", default=[]
    )
    parser.add_argument("--description")
    return parser.parse_args(argv)


async def create_key(args: argparse.Namespace) -> str:
    container = create_container()
    try:
        async with container() as request_container:
            service = await request_container.get(ApiKeyService)
            api_key = await service.create_key(
                partner_key=args.partner_key,
                partner_name=args.partner_name,
                scopes=args.scopes,
                allowed_ips=args.allowed_ips,
                description=args.description,
                created_by="cli",
            )
            return api_key.key
    finally:
        await container.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logfire(Settings())

    try:
        secret = asyncio.run(create_key(args))
    except DomainError as e:
        logfire.error("API key creation failed", error=e.message)
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    print(secret)
    return 0


if __name__ == "__main__":
    sys.exit(main())
