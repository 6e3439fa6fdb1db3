# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Inspect and edit a store file from the shell, going through
#   the same load / mutate / close(sync=True) cycle as library code.
#
# COMMANDS:
# ---------
# 1. Print the whole store as JSON:
#    python -m backedstore.cli --path users.json show
#
# 2. List keys:
#    python -m backedstore.cli --path users.json keys
#
# 3. Print one value:
#    python -m backedstore.cli --path users.json get alice
#
# 4. Set one value (JSON literal):
#    python -m backedstore.cli --path users.json set alice '{"visits": 1}'
#
# 5. Delete one key:
#    python -m backedstore.cli --path users.json delete alice
#
#   --path may be omitted when BACKEDSTORE_PATH is configured.
#
# EXIT STATUS:
# ------------
#   0  success
#   1  a store error was reported (access, format, write)
#   2  bad usage (argparse), bad JSON argument, or missing key
#
# ==============================================

import argparse
import json
import logging
import sys
from typing import Optional

from backedstore.config import get_config
from backedstore.storage.errors import StoreError
from backedstore.storage.file_storage import FileStorage
from backedstore.tracking.object_wrap import unwrap

logger = logging.getLogger(__name__)

READ_ONLY_COMMANDS = ("show", "keys", "get")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backedstore",
        description="Inspect and edit a backedstore JSON file."
    )
    parser.add_argument(
        "--path",
        help="store file (default: $BACKEDSTORE_PATH)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="print the whole store as JSON")
    sub.add_parser("keys", help="list the keys in the store")

    get_cmd = sub.add_parser("get", help="print the value of one key")
    get_cmd.add_argument("key")

    set_cmd = sub.add_parser("set", help="set a key to a JSON value")
    set_cmd.add_argument("key")
    set_cmd.add_argument("value", help="JSON literal, e.g. '{\"a\": 1}'")

    delete_cmd = sub.add_parser("delete", help="remove a key")
    delete_cmd.add_argument("key")

    return parser


def run(args: argparse.Namespace) -> int:
    """Execute one parsed command. Returns the process exit status."""
    config = get_config()
    path = args.path or config.default_path
    if not path:
        print("error: no store path given (use --path or BACKEDSTORE_PATH)", file=sys.stderr)
        return 2

    value = None
    if args.command == "set":
        try:
            value = json.loads(args.value)
        except json.JSONDecodeError as e:
            print(f"error: value is not valid JSON: {e}", file=sys.stderr)
            return 2

    errors: list[StoreError] = []
    store = FileStorage(path, config.sync_interval_ms)
    store.error(errors.append)
    store.load()

    status = 0
    if args.command == "show":
        snapshot = {}
        store.for_each_plain(lambda v, k: snapshot.__setitem__(k, v))
        print(json.dumps(snapshot, indent=2, ensure_ascii=False))
    elif args.command == "keys":
        for key in sorted(store.keys()):
            print(key)
    elif args.command == "get":
        if args.key not in store:
            print(f"error: no such key: {args.key}", file=sys.stderr)
            status = 2
        else:
            print(json.dumps(unwrap(store.get(args.key)), indent=2, ensure_ascii=False))
    elif args.command == "set":
        store.set(args.key, value)
    elif args.command == "delete":
        store.delete(args.key)

    # Read-only commands, and writes on top of a corrupt file, leave it alone
    flush = args.command not in READ_ONLY_COMMANDS and not any(
        e.kind == "format" for e in errors
    )
    store.close(sync=True, flush=flush)

    if args.command in ("set", "delete"):
        # Missing file on the first write is expected
        errors = [e for e in errors if not (e.kind == "access" and e.code == "ENOENT")]

    for err in errors:
        print(f"error: {err.kind}: {err.message}", file=sys.stderr)
    if errors and status == 0:
        return 1
    return status


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s"
    )
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
