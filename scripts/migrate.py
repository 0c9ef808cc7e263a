"""SQLファイルをデータサービスに適用する管理用スクリプト

Usage:
    python -m scripts.migrate sql/orders_analytics_schema.sql --verify-views
    python -m scripts.migrate sql/create_checkout_customer.sql --mode all_or_nothing
"""
import argparse
import logging
import sys

from services import migration
from utils.errors import ConfigurationError
from utils.log_config import configure_logging
from utils.settings import get_settings

logger = logging.getLogger("scripts.migrate")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Apply a SQL file through the data service")
    parser.add_argument("file", help="path to the SQL file")
    parser.add_argument("--mode", choices=["best_effort", "all_or_nothing"], default="best_effort",
                        help="best_effort continues after a failing statement; all_or_nothing wraps everything in one transaction")
    parser.add_argument("--verify-views", action="store_true", help="query the analytics views after applying")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()

    try:
        get_settings().require_supabase()
    except ConfigurationError as e:
        logger.error("%s", e.detail)
        return 2

    report = migration.apply_sql_file(args.file, args.mode)
    for result in report.failed:
        logger.error("Statement %d failed: %s", result.index + 1, result.error)

    if args.verify_views and not migration.verify_analytics_views():
        logger.warning("Analytics views could not be verified")

    print(report.summary())
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
