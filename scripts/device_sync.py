"""Operate the attendance engine from the command line.

    python scripts/device_sync.py poll         # one device poll (backfill on first run)
    python scripts/device_sync.py clock        # set the terminal clock to now
    python scripts/device_sync.py absentees [YYYY-MM-DD]
    python scripts/device_sync.py stale        # pending before today -> missing
    python scripts/device_sync.py payroll MONTH YEAR
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timeclock.timeclock.common.datetime_utils import parse_iso_date
from src.timeclock.timeclock.common.logging_utils import configure_logging
from src.timeclock.timeclock.container import build_container
from src.timeclock.timeclock.options import EngineOptions

logger = logging.getLogger("device_sync")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("poll")
    sub.add_parser("clock")
    absentees = sub.add_parser("absentees")
    absentees.add_argument("date", nargs="?")
    sub.add_parser("stale")
    payroll = sub.add_parser("payroll")
    payroll.add_argument("month", type=int)
    payroll.add_argument("year", type=int)
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=dict(settings.DB_CONFIG), options=EngineOptions.from_settings(settings))

    if args.command == "poll":
        result = container.ingestion_service.poll_once().to_dict()
    elif args.command == "clock":
        result = {"time": container.ingestion_service.sync_device_clock().isoformat(sep=" ")}
    elif args.command == "absentees":
        work_date = parse_iso_date(args.date) if args.date else None
        result = container.reconciliation_service.mark_absentees(work_date).to_dict()
    elif args.command == "stale":
        result = {"marked_missing": container.reconciliation_service.mark_stale_pending()}
    else:
        batch = container.payroll_service.calculate_all(month=args.month, year=args.year)
        result = {"calculated": len(batch.results), "errors": batch.errors}

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
