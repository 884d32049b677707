"""CLI for gappdata - JSON documents in the Drive application data folder.

Usage:
    gappdata init                       # Create directories, show setup instructions
    gappdata status                     # Show configuration status
    gappdata login                      # Interactive OAuth consent
    gappdata verify                     # Check the saved token with Google
    gappdata revoke                     # Revoke token and clear local cache
    gappdata list                       # List documents
    gappdata get <id>                   # Print a document
    gappdata create [name]              # Create an empty document
    gappdata update <id> <json|@path>   # Replace a document's contents
    gappdata delete <id>                # Delete a document
    gappdata rename <id> <name>         # Rename a document
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING

from gappdata.exceptions import AppDataError

if TYPE_CHECKING:
    from gappdata.store import AppDataStore

StoreOperation = Callable[["AppDataStore"], Awaitable[int]]


def cmd_init() -> int:
    """Initialize the gappdata home directory."""
    from gappdata.config import APP_DIR, CLIENT_ID_ENV, ENV_FILE, TOKEN_FILE, ensure_app_dir

    print("=" * 60)
    print("GAPPDATA SETUP")
    print("=" * 60)
    print()

    ensure_app_dir()
    print(f"Created: {APP_DIR}/")
    print()

    print("Local state:")
    print()
    print(f"  {ENV_FILE}")
    print(f"    {CLIENT_ID_ENV}=<OAuth client id>")
    print()
    print(f"  {TOKEN_FILE}")
    print("    Access token (created by 'gappdata login')")
    print()
    print("-" * 60)
    print()

    status = _check_status()
    if status["client_id"]:
        print("Client id configured")
    else:
        print("Create an OAuth client id (type: web application) at:")
        print("  https://console.cloud.google.com/apis/credentials")
        print(f"  Then add {CLIENT_ID_ENV}=... to {ENV_FILE}")
        print()

    return 0


def cmd_status() -> int:
    """Show configuration status."""
    status = _check_status()

    print("=" * 60)
    print("GAPPDATA STATUS")
    print("=" * 60)
    print()
    print(f"Home: {status['app_dir']}")
    print()
    print(f"  .env:       {'[x]' if status['env_file'] else '[ ]'}")
    print(f"  client id:  {'[x]' if status['client_id'] else '[ ]'}")
    print(f"  token.json: {'[x]' if status['token'] else '[ ]'}")
    print()
    return 0


def _check_status() -> dict:
    """Get configuration status."""
    from gappdata.config import get_config_status

    return get_config_status()


def _open_store(
    client_id: str | None,
    scopes: list[str] | None = None,
    no_browser: bool = False,
):
    """Create a store that persists its token in the gappdata home."""
    from gappdata.auth import FileTokenStore, ImplicitGrantAuthenticator, browser_consent_handler
    from gappdata.config import TOKEN_FILE
    from gappdata.store import AppDataStore

    authenticator = ImplicitGrantAuthenticator(
        scopes=scopes,
        consent_handler=functools.partial(browser_consent_handler, open_browser=not no_browser),
    )
    return AppDataStore(
        client_id=client_id,
        authenticator=authenticator,
        token_store=FileTokenStore(TOKEN_FILE),
    )


def _run(args: argparse.Namespace, operation: StoreOperation) -> int:
    """Run one store operation, reporting errors as exit code 1."""

    async def runner() -> int:
        store = _open_store(
            args.client_id,
            scopes=parse_scopes(getattr(args, "scopes", None)),
            no_browser=getattr(args, "no_browser", False),
        )
        async with store:
            return await operation(store)

    try:
        return asyncio.run(runner())
    except (AppDataError, ValueError) as e:
        # ValueError covers bad options such as unknown scope names
        print(f"Error: {e}")
        return 1


def store_login(args: argparse.Namespace) -> int:
    """Acquire an access token."""

    async def login(store) -> int:
        if store.access_token and not args.force:
            print("Already authorized (use --force to re-authenticate)")
            return 0
        if args.force:
            await store.reauthenticate()
        else:
            await store.ensure_authenticated()
        print("Token saved successfully!")
        return 0

    return _run(args, login)


def store_revoke(args: argparse.Namespace) -> int:
    """Revoke the access token."""

    async def revoke(store) -> int:
        await store.revoke()
        print("Token revoked and local cache cleared")
        return 0

    return _run(args, revoke)


def store_verify(args: argparse.Namespace) -> int:
    """Check the saved token with the tokeninfo endpoint."""
    from gappdata.auth import FileTokenStore, ImplicitGrantAuthenticator
    from gappdata.config import TOKEN_FILE

    token = FileTokenStore(TOKEN_FILE).load()
    if not token:
        print("No token found - run 'gappdata login'")
        return 1

    valid = asyncio.run(ImplicitGrantAuthenticator().verify_token(token))
    print(f"Status: {'valid' if valid else 'invalid'}")
    return 0 if valid else 1


def store_list(args: argparse.Namespace) -> int:
    """List documents."""

    async def list_files(store) -> int:
        files = await store.list()
        if not files:
            print("No documents")
            return 0
        for f in files:
            modified = f.modified_time.isoformat() if f.modified_time else "-"
            print(f"{f.id}  {modified}  {f.name}")
        return 0

    return _run(args, list_files)


def store_get(args: argparse.Namespace) -> int:
    """Print a document."""

    async def get(store) -> int:
        contents = await store.get(args.id)
        print(json.dumps(contents, indent=2))
        return 0

    return _run(args, get)


def store_create(args: argparse.Namespace) -> int:
    """Create an empty document."""

    async def create(store) -> int:
        file_id = await store.create(args.name) if args.name else await store.create()
        print(file_id)
        return 0

    return _run(args, create)


def store_update(args: argparse.Namespace) -> int:
    """Replace a document's contents."""
    contents = args.contents
    if contents.startswith("@"):
        source = Path(contents[1:]).expanduser()
        if not source.exists():
            print(f"Error: File not found: {source}")
            return 1
        contents = source.read_text()

    try:
        json.loads(contents)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}")
        return 1

    async def update(store) -> int:
        await store.update(args.id, contents)
        print(f"Updated {args.id}")
        return 0

    return _run(args, update)


def store_delete(args: argparse.Namespace) -> int:
    """Delete a document."""

    async def delete(store) -> int:
        await store.delete(args.id)
        print(f"Deleted {args.id}")
        return 0

    return _run(args, delete)


def store_rename(args: argparse.Namespace) -> int:
    """Rename a document."""

    async def rename(store) -> int:
        await store.rename(args.id, args.name)
        print(f"Renamed {args.id} to {args.name}")
        return 0

    return _run(args, rename)


def parse_scopes(scope_str: str | None) -> list[str] | None:
    """Parse comma-separated scopes."""
    if not scope_str:
        return None
    return [s.strip() for s in scope_str.split(",")]


COMMANDS: dict[str, Callable[[argparse.Namespace], int]] = {
    "login": store_login,
    "revoke": store_revoke,
    "verify": store_verify,
    "list": store_list,
    "get": store_get,
    "create": store_create,
    "update": store_update,
    "delete": store_delete,
    "rename": store_rename,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="gappdata",
        description="JSON documents in the Google Drive application data folder",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("init", help="Initialize the gappdata home directory")
    subparsers.add_parser("status", help="Show configuration status")

    # Shared by every command that talks to Drive
    store_parent = argparse.ArgumentParser(add_help=False)
    store_parent.add_argument(
        "--client-id",
        type=str,
        default=None,
        help="OAuth client id (default: GAPPDATA_CLIENT_ID)",
    )

    login_parser = subparsers.add_parser(
        "login", parents=[store_parent], help="Interactive OAuth consent"
    )
    login_parser.add_argument(
        "--scopes",
        type=str,
        default=None,
        help="Comma-separated scopes (default: drive_file,drive_appdata)",
    )
    login_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open browser automatically",
    )
    login_parser.add_argument(
        "--force",
        action="store_true",
        help="Discard the saved token and authenticate again",
    )

    subparsers.add_parser("revoke", parents=[store_parent], help="Revoke token")
    subparsers.add_parser("verify", help="Check the saved token")
    subparsers.add_parser("list", parents=[store_parent], help="List documents")

    get_parser = subparsers.add_parser("get", parents=[store_parent], help="Print a document")
    get_parser.add_argument("id", help="Document id")

    create_parser = subparsers.add_parser(
        "create", parents=[store_parent], help="Create an empty document"
    )
    create_parser.add_argument("name", nargs="?", default=None, help="Document name")

    update_parser = subparsers.add_parser(
        "update", parents=[store_parent], help="Replace a document's contents"
    )
    update_parser.add_argument("id", help="Document id")
    update_parser.add_argument("contents", help="JSON text, or @path to read it from a file")

    delete_parser = subparsers.add_parser(
        "delete", parents=[store_parent], help="Delete a document"
    )
    delete_parser.add_argument("id", help="Document id")

    rename_parser = subparsers.add_parser(
        "rename", parents=[store_parent], help="Rename a document"
    )
    rename_parser.add_argument("id", help="Document id")
    rename_parser.add_argument("name", help="New document name")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init":
        return cmd_init()

    if args.command == "status":
        return cmd_status()

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
