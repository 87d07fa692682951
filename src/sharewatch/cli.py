"""Command-line tools for operators.

    sharewatch init-db
    sharewatch flags [--user USER_ID] [--limit N]
    sharewatch devices USER_ID [--active-only]
"""

import argparse
import json
import sys
from typing import List, Optional

from sharewatch.common.config.settings import get_config
from sharewatch.common.exceptions import ShareWatchError
from sharewatch.common.logging import configure_logging
from sharewatch.common.constants import DataConstants
from sharewatch.devices.registry import DeviceRegistry
from sharewatch.governance.flags import FlaggingService
from sharewatch.storage.database import Database


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharewatch",
        description="Device limits and account-sharing flags",
    )
    parser.add_argument("--database-url", help="Override SHAREWATCH_DATABASE_URL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables")

    flags = sub.add_parser("flags", help="List account flags")
    flags.add_argument("--user", help="Show all flags for one user")
    flags.add_argument("--limit", type=int, default=DataConstants.PENDING_FLAGS_LIMIT)

    devices = sub.add_parser("devices", help="List a user's devices")
    devices.add_argument("user_id")
    devices.add_argument("--active-only", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    logger = configure_logging(config.log_level.value)

    database = Database(args.database_url or config.database_url, echo=config.database_echo)
    try:
        if args.command == "init-db":
            database.create_all()
            logger.info("Tables created")
            return 0

        if args.command == "flags":
            service = FlaggingService(database)
            if args.user:
                flags = service.flags_for_user(args.user)
            else:
                flags = service.pending_flags(limit=args.limit)
            for flag in flags:
                print(flag.model_dump_json())
            return 0

        if args.command == "devices":
            registry = DeviceRegistry(database)
            for device in registry.list_devices(args.user_id, active_only=args.active_only):
                print(device.model_dump_json())
            return 0
    except ShareWatchError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    finally:
        database.dispose()

    return 2


if __name__ == "__main__":
    sys.exit(main())
