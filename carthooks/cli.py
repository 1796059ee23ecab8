"""
Carthooks CLI - Command-line interface.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- Configuration from CARTHOOKS_* environment variables and flags
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from typing import Any

from carthooks.core.client import ClientConfig
from carthooks.core.errors import CarthooksError, ValidationError
from carthooks.core.types import Envelope
from carthooks.sdk import CarthooksClient

logger = logging.getLogger(__name__)

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CarthooksError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def envelope_output(envelope: Envelope) -> None:
    """Print an envelope's payload with its metadata."""
    success_output({"data": envelope.data, "meta": envelope.meta, "trace_id": envelope.trace_id})


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


# =============================================================================
# Input Helpers
# =============================================================================


def read_json_arg(value: str | None, flag: str) -> dict[str, Any] | None:
    """Parse a JSON object from an argument, or from stdin when it is '-'."""
    if not value:
        return None
    try:
        data = json.load(sys.stdin) if value == "-" else json.loads(value)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {flag}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"{flag} must be a JSON object, got {type(data).__name__}")
    return data


def parse_filter(spec: str) -> tuple[str, str, str]:
    """Parse FIELD:OP=VALUE into its parts."""
    condition, sep, value = spec.partition("=")
    field, colon, operator = condition.partition(":")
    if not sep or not colon or not field or not operator:
        raise ValidationError(f"Invalid filter {spec!r}, expected FIELD:OP=VALUE (e.g. price:gte=10)")
    return field, operator, value


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_items_list(client: CarthooksClient, args: argparse.Namespace) -> None:
    """List items in a collection."""
    try:
        query = client.query(args.app_id, args.collection_id)
        if args.limit is not None:
            query.limit(args.limit)
        if args.page is not None:
            query.page(args.page)
        if args.sort:
            query.sort(args.sort)
        for spec in args.filter or []:
            query.filter(*parse_filter(spec))

        items = query.get()

        if is_tty():
            if not items:
                print("No items found.")
                return
            table_output(
                ["ID", "Fields"],
                [[str(item.id), json.dumps(item.fields, default=str)] for item in items],
                [10, 80],
            )
        else:
            success_output({"data": [item.to_dict() for item in items], "count": len(items)})
    except CarthooksError as e:
        error_output(e)


def cmd_items_get(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Get an item by ID."""
    try:
        item = client.items.get(args.app_id, args.collection_id, args.item_id)
        success_output(item.to_dict())
    except CarthooksError as e:
        error_output(e)


def cmd_items_create(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Create a new item."""
    try:
        data = read_json_arg(args.data, "--data") or {}
        item = client.items.create(args.app_id, args.collection_id, data)
        success_output({**item.to_dict(), "message": "Item created"})
    except CarthooksError as e:
        error_output(e)


def cmd_items_update(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Update fields on an item."""
    try:
        data = read_json_arg(args.data, "--data") or {}
        envelope_output(client.items.update(args.app_id, args.collection_id, args.item_id, data))
    except CarthooksError as e:
        error_output(e)


def cmd_items_delete(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Delete an item."""
    try:
        client.items.delete(args.app_id, args.collection_id, args.item_id)
        success_output({"success": True, "message": f"Item {args.item_id} deleted"})
    except CarthooksError as e:
        error_output(e)


def cmd_items_lock(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Lock an item."""
    try:
        envelope = client.items.lock(
            args.app_id,
            args.collection_id,
            args.item_id,
            lock_id=args.lock_id,
            lock_timeout=args.timeout,
            subject=args.subject,
        )
        envelope_output(envelope)
    except CarthooksError as e:
        error_output(e)


def cmd_items_unlock(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Unlock an item."""
    try:
        envelope_output(client.items.unlock(args.app_id, args.collection_id, args.item_id, args.lock_id))
    except CarthooksError as e:
        error_output(e)


def cmd_token_submission(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Get a submission token for a collection."""
    try:
        options = read_json_arg(args.options, "--options")
        envelope_output(client.tokens.submission(args.app_id, args.collection_id, options))
    except CarthooksError as e:
        error_output(e)


def cmd_token_update(client: CarthooksClient, args: argparse.Namespace) -> None:
    """Get an update token for an item."""
    try:
        options = read_json_arg(args.options, "--options")
        envelope_output(client.tokens.update(args.app_id, args.collection_id, args.item_id, options))
    except CarthooksError as e:
        error_output(e)


def cmd_token_upload(client: CarthooksClient, _args: argparse.Namespace) -> None:
    """Get a file upload token."""
    try:
        envelope_output(client.tokens.upload())
    except CarthooksError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def _add_collection_args(parser: argparse.ArgumentParser, with_item: bool = False) -> None:
    parser.add_argument("app_id", type=int, help="App ID")
    parser.add_argument("collection_id", type=int, help="Collection ID")
    if with_item:
        parser.add_argument("item_id", type=int, help="Item ID")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="carthooks",
        description="Carthooks CLI - Command-line interface for the Carthooks API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  CARTHOOKS_API_URL       API base URL (default: https://api.carthooks.com)
  CARTHOOKS_ACCESS_TOKEN  Bearer token

Examples:
  carthooks items list 1 2 --limit 20 --filter price:gte=10 --filter price:lte=99
  carthooks items list 1 2 --sort=-created_at
  carthooks items create 1 2 --data '{"title": "x"}'
  carthooks items lock 1 2 42 --lock-id worker-1 --timeout 30
  carthooks token upload
""",
    )
    parser.add_argument("--base-url", help="API base URL (overrides CARTHOOKS_API_URL)")
    parser.add_argument("--token", help="Access token (overrides CARTHOOKS_ACCESS_TOKEN)")
    parser.add_argument("--timeout", type=float, dest="request_timeout", help="Request timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Items ==========
    items = subparsers.add_parser("items", help="List and manage collection items")
    items.set_defaults(func=lambda _c, _a: items.print_help())
    items_sub = items.add_subparsers(dest="subcommand")

    i_list = items_sub.add_parser("list", help="List items")
    _add_collection_args(i_list)
    i_list.add_argument("--limit", "-l", type=int, help="Page size")
    i_list.add_argument("--page", "-p", type=int, help="Page number")
    i_list.add_argument("--sort", "-s", help="Sort expression; use --sort=-EXPR for descending order")
    i_list.add_argument(
        "--filter",
        "-f",
        action="append",
        metavar="FIELD:OP=VALUE",
        help="Filter condition (repeatable)",
    )
    i_list.set_defaults(func=cmd_items_list)

    i_get = items_sub.add_parser("get", help="Get item details")
    _add_collection_args(i_get, with_item=True)
    i_get.set_defaults(func=cmd_items_get)

    i_create = items_sub.add_parser("create", help="Create an item")
    _add_collection_args(i_create)
    i_create.add_argument("--data", "-d", help="JSON object with field values (or - for stdin)")
    i_create.set_defaults(func=cmd_items_create)

    i_update = items_sub.add_parser("update", help="Update an item")
    _add_collection_args(i_update, with_item=True)
    i_update.add_argument("--data", "-d", required=True, help="JSON object with field values (or - for stdin)")
    i_update.set_defaults(func=cmd_items_update)

    i_delete = items_sub.add_parser("delete", help="Delete an item")
    _add_collection_args(i_delete, with_item=True)
    i_delete.set_defaults(func=cmd_items_delete)

    i_lock = items_sub.add_parser("lock", help="Lock an item")
    _add_collection_args(i_lock, with_item=True)
    i_lock.add_argument("--lock-id", required=True, help="Lock identifier (needed to unlock)")
    i_lock.add_argument("--timeout", type=int, default=0, help="Lock timeout in seconds")
    i_lock.add_argument("--subject", default="", help="Lock holder description")
    i_lock.set_defaults(func=cmd_items_lock)

    i_unlock = items_sub.add_parser("unlock", help="Unlock an item")
    _add_collection_args(i_unlock, with_item=True)
    i_unlock.add_argument("--lock-id", required=True, help="Lock identifier used to lock")
    i_unlock.set_defaults(func=cmd_items_unlock)

    # ========== Tokens ==========
    token = subparsers.add_parser("token", help="Issue submission, update and upload tokens")
    token.set_defaults(func=lambda _c, _a: token.print_help())
    token_sub = token.add_subparsers(dest="subcommand")

    t_submission = token_sub.add_parser("submission", help="Get a submission token")
    _add_collection_args(t_submission)
    t_submission.add_argument("--options", "-o", help="JSON object with token options (or - for stdin)")
    t_submission.set_defaults(func=cmd_token_submission)

    t_update = token_sub.add_parser("update", help="Get an update token for an item")
    _add_collection_args(t_update, with_item=True)
    t_update.add_argument("--options", "-o", help="JSON object with token options (or - for stdin)")
    t_update.set_defaults(func=cmd_token_update)

    t_upload = token_sub.add_parser("upload", help="Get a file upload token")
    t_upload.set_defaults(func=cmd_token_upload)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    # Environment is read here and nowhere else
    config = ClientConfig.from_env(
        base_url=args.base_url,
        access_token=args.token,
        timeout=args.request_timeout,
    )
    logger.debug("Using API at %s", config.base_url)
    client = CarthooksClient(config)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
