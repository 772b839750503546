from __future__ import annotations

import json

from sqlalchemy import create_engine, func, select

from app.brandlog.db.models import LoginEvent, User
from scripts import seed_demo_data


def test_cli_seeds_admin_and_events(migrate_sqlite, capsys):
    database_url = migrate_sqlite("cli.db")

    exit_code = seed_demo_data.main(["--database-url", database_url, "--days", "3", "--seed", "42"])

    assert exit_code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["brands"] == 2
    assert summary["demo_user"] is None
    engine = create_engine(database_url, future=True)
    with engine.connect() as conn:
        assert conn.execute(select(func.count()).select_from(LoginEvent)).scalar_one() == summary["events"]
        assert conn.execute(select(User.username)).scalars().all() == [summary["admin"]]
    engine.dispose()


def test_cli_admin_only(migrate_sqlite, capsys):
    database_url = migrate_sqlite("cli.db")

    seed_demo_data.main(["--database-url", database_url, "--admin-only"])

    summary = json.loads(capsys.readouterr().out)
    assert set(summary) == {"admin"}
