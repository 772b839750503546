from __future__ import annotations

import argparse
import json
import os

from sqlalchemy.orm import Session

from app.brandlog.core.config import settings
from app.brandlog.db.seed import run_seed, seed_demo_data
from app.brandlog.db.session import build_engine


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the bootstrap admin and demo login events")
    parser.add_argument("--database-url", default=os.getenv("DATABASE_URL", settings.DATABASE_URL))
    parser.add_argument("--days", type=int, default=30, help="number of past days to generate events for")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    parser.add_argument(
        "--user-password",
        default=os.getenv("DEMO_USER_PASSWORD"),
        help="create the demo user with this password (skipped when omitted)",
    )
    parser.add_argument("--admin-only", action="store_true", help="only create the bootstrap admin")
    args = parser.parse_args(argv)

    engine = build_engine(args.database_url)
    try:
        with Session(engine) as db:
            admin = run_seed(db)
            summary = {"admin": admin.username}
            if not args.admin_only:
                summary.update(seed_demo_data(db, days=args.days, seed=args.seed, user_password=args.user_password))
    finally:
        engine.dispose()

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
