"""
Command-line front end for the session context.

Usage:
    python -m client signup <username> <email>
    python -m client login <email>
    python -m client whoami
    python -m client logout
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from typing import List, Optional

from client.api import AuthAPI
from client.session import SessionContext
from client.storage import FileTokenStorage
from config.settings import config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="client", description="Authflow session client")
    parser.add_argument("--api", default=config.api_base_url, help="API base URL")
    parser.add_argument("--token-file", default=config.token_file, help="where the session token is kept")
    sub = parser.add_subparsers(dest="command", required=True)

    signup = sub.add_parser("signup", help="create an account and log in")
    signup.add_argument("username")
    signup.add_argument("email")

    login = sub.add_parser("login", help="log in with email and password")
    login.add_argument("email")

    sub.add_parser("whoami", help="show the logged-in user")
    sub.add_parser("logout", help="forget the stored session")
    return parser


async def _run(args: argparse.Namespace) -> int:
    storage = FileTokenStorage(args.token_file)
    api = AuthAPI.connect(args.api, storage)
    try:
        if args.command == "logout":
            SessionContext(api, storage).logout()
            print("Logged out.")
            return 0

        ctx = await SessionContext.open(api, storage)
        if args.command == "whoami":
            if not ctx.is_authenticated:
                print("Not logged in.")
                return 1
            print(f"{ctx.user['username']} <{ctx.user['email']}>")
            return 0

        password = getpass.getpass("Password: ")
        if args.command == "signup":
            result = await ctx.signup(args.username, args.email, password)
        else:
            result = await ctx.login(args.email, password)

        if not result.success:
            print(f"Error: {result.error}", file=sys.stderr)
            return 1
        print(f"Welcome, {ctx.user['username']}!")
        return 0
    finally:
        await api.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s — %(message)s")
    args = _build_parser().parse_args(argv)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
