"""Tests for the history maintenance CLI."""

import asyncio
import json

import pytest

from healthspeak.db.async_session import Database
from healthspeak.repositories.history_repository import HistoryRepository
from healthspeak.schemas.history import NewHistoryItem
from healthspeak.scripts.manage_history import build_parser, run


def run_command(database_url, argv, setup=None):
    async def main():
        database = Database(database_url)
        await database.create_all()
        try:
            if setup is not None:
                await setup(HistoryRepository(database))
            code = await run(build_parser().parse_args(argv), database)
            return code, await HistoryRepository(database).count()
        finally:
            await database.dispose()

    return asyncio.run(main())


async def two_records(repo):
    for text in ("Paracetamol 500mg every 6 hours", "Ibuprofen 400mg after meals"):
        await repo.add(NewHistoryItem(original_text=text, simplified_text=text))


class TestManageHistory:
    def test_backup_writes_json_array(self, database_url, tmp_path):
        output = tmp_path / "backup.json"

        code, _ = run_command(database_url, ["backup", "--output", str(output)], setup=two_records)

        assert code == 0
        records = json.loads(output.read_text(encoding="utf-8"))
        assert len(records) == 2
        assert {"id", "originalText", "createdAt", "updatedAt", "processingStatus"} <= set(records[0])

    def test_restore_reinserts_backup(self, database_url, tmp_path):
        output = tmp_path / "backup.json"
        run_command(database_url, ["backup", "--output", str(output)], setup=two_records)

        code, total = run_command(database_url, ["restore", str(output), "--batch-size", "1"])

        assert code == 0
        assert total == 4

    def test_restore_rejects_non_array(self, database_url, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"not": "a list"}', encoding="utf-8")

        code, total = run_command(database_url, ["restore", str(path)])

        assert code == 1
        assert total == 0

    def test_stats_prints_json(self, database_url, capsys):
        code, _ = run_command(database_url, ["stats"], setup=two_records)

        assert code == 0
        assert json.loads(capsys.readouterr().out)["total"] == 2

    def test_cleanup(self, database_url):
        code, total = run_command(database_url, ["cleanup"], setup=two_records)

        assert code == 0
        assert total == 2

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["migrate"])
