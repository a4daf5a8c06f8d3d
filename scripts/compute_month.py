"""Compute (and optionally lock) a month from the command line.

    python scripts/compute_month.py 2026-01
    python scripts/compute_month.py 2026-01 --lock
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hrm_system.hrm_system.container import build_container
from src.hrm_system.hrm_system.core.exceptions import DomainError


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute monthly KPI results for every subject.")
    parser.add_argument("month_key", help="Month to compute, YYYY-MM.")
    parser.add_argument("--lock", action="store_true", help="Lock the month after a run without failures.")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s [%(name)s] %(message)s")

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        tz_name=getattr(settings, "HRM_TIMEZONE", "Asia/Dhaka"),
        tier_policy=getattr(settings, "HRM_TIER_POLICY", None),
        smtp_config=getattr(settings, "SMTP_CONFIG", None),
        company_info=getattr(settings, "COMPANY_INFO", None),
    )

    try:
        computation = container.monthly_service.compute_month(args.month_key)
    except DomainError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    for result in computation.results:
        score = "-" if result.monthly_score is None else f"{result.monthly_score:.2f}"
        print(
            f"subject={result.subject_user_id} score={score} tier={result.tier.value} "
            f"weeks={result.weeks_count_used}/{result.expected_weeks_count} fine={result.final_fine:.2f}"
        )
    for subject_id, message in computation.failures.items():
        print(f"FAILED subject={subject_id}: {message}", file=sys.stderr)

    print(f"OK: {computation.month_key} computed for {len(computation.results)} subject(s)")

    if args.lock:
        if computation.failures:
            print("Not locking: some subjects failed", file=sys.stderr)
            return 1
        container.monthly_service.lock_month(computation.month_key)
        print(f"OK: {computation.month_key} locked")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
