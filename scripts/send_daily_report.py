#!/usr/bin/env python3
"""
Send the daily delivery report

Meant to run once a day from cron, e.g.:

    CRON_TZ=Europe/Rome
    0 8 * * * cd /srv/gestionale && python scripts/send_daily_report.py

Usage:
    python scripts/send_daily_report.py                    # today in REPORT_TIMEZONE
    python scripts/send_daily_report.py --date 2025-12-20  # another window start
    python scripts/send_daily_report.py --dry-run          # list orders, send nothing
"""
import sys
import asyncio
import logging
import argparse
from datetime import date
from pathlib import Path
from dotenv import load_dotenv

# Load environment
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from gestionale.core.config import settings
from gestionale.repositories.order_repository import OrderRepository
from gestionale.services.notification_service import MailNotificationDispatcher
from gestionale.services.report_service import DeliveryWindowQuery, send_daily_report

logger = logging.getLogger("send_daily_report")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Mail the orders due in the delivery window")
    parser.add_argument("--date", type=date.fromisoformat, default=None,
                        help="Window start (YYYY-MM-DD), default today in REPORT_TIMEZONE")
    parser.add_argument("--dry-run", action="store_true", help="Print the orders instead of mailing them")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(message)s")

    query = DeliveryWindowQuery(
        OrderRepository(),
        window_days=settings.REPORT_WINDOW_DAYS,
        timezone=settings.REPORT_TIMEZONE,
    )

    try:
        if args.dry_run:
            start, end = query.window(args.date)
            for order in query.run(start):
                print(f"{order.data_consegna} #{order.id} {order.nome} {order.cognome} "
                      f"{order.luogo_consegna} €{float(order.totale):.2f}")
            return 0

        notifier = MailNotificationDispatcher.from_settings(settings)
        result = asyncio.run(send_daily_report(query, notifier, args.date))
    except Exception:
        logger.exception("Daily report job failed")
        return 1

    return 0 if result.sent else 1


if __name__ == "__main__":
    sys.exit(main())
