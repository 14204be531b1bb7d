from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from healthspeak.core.config import get_settings
from healthspeak.core.errors import HealthSpeakError
from healthspeak.db.async_session import Database
from healthspeak.repositories.history_repository import HistoryRepository

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _default_backup_path() -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return Path.cwd() / f"history-backup-{stamp}.json"


async def _init_db(database: Database, args: argparse.Namespace) -> int:
    await database.create_all()
    return 0


async def _stats(database: Database, args: argparse.Namespace) -> int:
    stats = await HistoryRepository(database).stats()
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))
    return 0


async def _backup(database: Database, args: argparse.Namespace) -> int:
    items = await HistoryRepository(database).backup()
    path = Path(args.output) if args.output else _default_backup_path()
    payload = [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %s history records to %s", len(payload), path.as_posix())
    return 0


async def _restore(database: Database, args: argparse.Namespace) -> int:
    path = Path(args.path)
    if not path.exists():
        raise FileNotFoundError(f"Backup file not found: {path}")

    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        logger.error("Backup file must contain a JSON array of history records")
        return 1

    result = await HistoryRepository(database).restore(records, batch_size=args.batch_size)
    logger.info("Restore finished: inserted=%s requested=%s", result.inserted, result.requested)
    return 0 if result.success else 1


async def _cleanup(database: Database, args: argparse.Namespace) -> int:
    result = await HistoryRepository(database).cleanup()
    logger.info(
        "Cleanup finished: test records removed=%s, failed records removed=%s",
        result.test_records_removed,
        result.failed_records_removed,
    )
    return 0


COMMANDS = {
    "init-db": _init_db,
    "stats": _stats,
    "backup": _backup,
    "restore": _restore,
    "cleanup": _cleanup,
}


async def run(args: argparse.Namespace, database: Database | None = None) -> int:
    owned = database is None
    database = database or Database(get_settings().async_database_uri)
    try:
        return await COMMANDS[args.command](database, args)
    finally:
        if owned:
            await database.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HealthSpeak prescription history maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the history table if it does not exist")
    sub.add_parser("stats", help="Print aggregate history statistics as JSON")

    backup = sub.add_parser("backup", help="Export every history record to a JSON file")
    backup.add_argument("--output", default=None, help="Destination file (defaults to ./history-backup-<UTC>.json)")

    restore = sub.add_parser("restore", help="Re-insert records from a JSON backup under new ids")
    restore.add_argument("path", help="Backup file produced by the backup command")
    restore.add_argument("--batch-size", type=int, default=500, help="Records committed per batch")

    sub.add_parser("cleanup", help="Delete old test/sample/demo records and stale failed records")
    return parser


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)

    try:
        return asyncio.run(run(args))
    except (HealthSpeakError, OSError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
