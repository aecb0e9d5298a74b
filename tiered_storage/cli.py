# ==============================================
# CLI - Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Inspect and edit a configured store from a shell. Backends come
#   from the environment / .env (see config.py); with the default
#   in-memory backends nothing outlives the process, so point
#   VOLATILE_BACKEND / DURABLE_BACKEND at file, mongo or mysql first.
#
# COMMANDS:
# ---------
#   python -m tiered_storage.cli set auth.token abc123
#   python -m tiered_storage.cli set retries 3 --json --volatile
#   python -m tiered_storage.cli get auth.token
#   python -m tiered_storage.cli remove auth.token
#   python -m tiered_storage.cli migrate user.name --to durable
#   python -m tiered_storage.cli stats --update
#   python -m tiered_storage.cli stats --reset
#   python -m tiered_storage.cli validate "some key"
#
# Exit status is 0 on success, 1 on a failed operation.
#
# ==============================================

import argparse
import json
import logging
import sys
from typing import Optional

from .analysis.decision import AUTOMATIC, AccessibilityLevel, StorageIntent
from .analysis.validator import validate_key
from .config import get_config
from .context import TieredStorage
from .errors import StorageError
from .storage.codec import encode_value
from .storage.migrator import MigrationDirection

logger = logging.getLogger(__name__)


def _intent(args: argparse.Namespace) -> StorageIntent:
    if args.volatile:
        return StorageIntent.volatile()
    if args.durable:
        return StorageIntent.durable(AccessibilityLevel.parse(args.durable))
    return AUTOMATIC


def _sensitive(args: argparse.Namespace) -> Optional[bool]:
    return getattr(args, "sensitive", None)


def cmd_set(storage: TieredStorage, args: argparse.Namespace) -> int:
    value = json.loads(args.value) if args.json else args.value
    result = storage.set(value, args.key, _intent(args), sensitive=_sensitive(args))
    if not result:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print(f"Stored '{args.key}'")
    return 0


def cmd_get(storage: TieredStorage, args: argparse.Namespace) -> int:
    result = storage.get_result(args.key, None, _intent(args), sensitive=_sensitive(args))
    if result.failed:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    if not result.found:
        print(f"No value for '{args.key}'", file=sys.stderr)
        return 1
    # codec JSON, so bytes print in their tagged base64 form
    print(encode_value(result.value).decode("utf-8"))
    return 0


def cmd_remove(storage: TieredStorage, args: argparse.Namespace) -> int:
    result = storage.remove(args.key, _intent(args), sensitive=_sensitive(args))
    if not result:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print(f"Removed '{args.key}'")
    return 0


def cmd_migrate(storage: TieredStorage, args: argparse.Namespace) -> int:
    if args.to == "durable":
        direction = MigrationDirection.VOLATILE_TO_DURABLE
    else:
        direction = MigrationDirection.DURABLE_TO_VOLATILE
    result = storage.migrate(args.key, direction, AccessibilityLevel.parse(args.accessibility))
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result else 1


def cmd_stats(storage: TieredStorage, args: argparse.Namespace) -> int:
    engine = storage.statistics
    for warning in engine.load_warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if args.reset:
        stats = engine.reset_statistics()
    elif args.update:
        stats = engine.update_statistics()
    else:
        stats = engine.snapshot()
    print(json.dumps(stats.to_dict(), indent=2))
    return 0


def cmd_validate(storage: TieredStorage, args: argparse.Namespace) -> int:
    valid = validate_key(args.key)
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def _add_routing_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--volatile", action="store_true", help="Use the volatile tier")
    group.add_argument(
        "--durable",
        metavar="LEVEL",
        nargs="?",
        const=AccessibilityLevel.WHEN_UNLOCKED.value,
        help="Use the durable tier at LEVEL (default when_unlocked)",
    )
    sensitivity = parser.add_mutually_exclusive_group()
    sensitivity.add_argument(
        "--sensitive", dest="sensitive", action="store_const", const=True,
        help="Declare the value sensitive (automatic routing)",
    )
    sensitivity.add_argument(
        "--not-sensitive", dest="sensitive", action="store_const", const=False,
        help="Declare the value non-sensitive (automatic routing)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tiered_storage",
        description="Two-tier key-value storage tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--env-file", help="Path to a .env file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    set_parser = subparsers.add_parser("set", help="Store a value")
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    set_parser.add_argument("--json", action="store_true", help="Parse VALUE as JSON")
    _add_routing_arguments(set_parser)
    set_parser.set_defaults(func=cmd_set)

    get_parser = subparsers.add_parser("get", help="Print a stored value as JSON")
    get_parser.add_argument("key")
    _add_routing_arguments(get_parser)
    get_parser.set_defaults(func=cmd_get)

    remove_parser = subparsers.add_parser("remove", help="Remove a value")
    remove_parser.add_argument("key")
    _add_routing_arguments(remove_parser)
    remove_parser.set_defaults(func=cmd_remove)

    migrate_parser = subparsers.add_parser("migrate", help="Move a value between tiers")
    migrate_parser.add_argument("key")
    migrate_parser.add_argument("--to", choices=("durable", "volatile"), required=True)
    migrate_parser.add_argument(
        "--accessibility",
        default=AccessibilityLevel.WHEN_UNLOCKED.value,
        help="Durable-side accessibility level",
    )
    migrate_parser.set_defaults(func=cmd_migrate)

    stats_parser = subparsers.add_parser("stats", help="Show usage statistics")
    stats_action = stats_parser.add_mutually_exclusive_group()
    stats_action.add_argument("--update", action="store_true", help="Record an app-open event")
    stats_action.add_argument("--reset", action="store_true", help="Zero statistics in both tiers")
    stats_parser.set_defaults(func=cmd_stats)

    validate_parser = subparsers.add_parser("validate", help="Check whether a key is valid")
    validate_parser.add_argument("key")
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[list] = None, storage: Optional[TieredStorage] = None) -> int:
    """Main entry point for the storage CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "validate":
        return cmd_validate(storage, args)

    owns_storage = storage is None
    if owns_storage:
        storage = TieredStorage.from_config(get_config(args.env_file))
    logger.debug("Running command %s", args.command)
    try:
        return args.func(storage, args)
    except (ValueError, StorageError) as e:
        # malformed input or statistics disabled
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if owns_storage:
            storage.close()


if __name__ == "__main__":
    sys.exit(main())
