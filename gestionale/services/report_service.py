"""
Report Service
Delivery-window query and the daily delivery report

The daily job is triggered from outside (cron at 08:00 Europe/Rome running
scripts/send_daily_report.py, or an HTTP cron calling
POST /api/v1/reports/daily). "Today" is always evaluated in the report
timezone, not the server's.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from gestionale.domain.order import Order
from gestionale.repositories.order_repository import OrderRepository
from gestionale.services.notification_service import MailNotificationDispatcher

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 5
DEFAULT_TIMEZONE = "Europe/Rome"


class DeliveryWindowQuery:
    """
    Orders due for delivery within a rolling window

    Stateless and read-only: run() can be repeated freely.
    """

    def __init__(
        self,
        orders: OrderRepository,
        window_days: int = DEFAULT_WINDOW_DAYS,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        if window_days < 0:
            raise ValueError("window_days must be >= 0")
        self.orders = orders
        self.window_days = window_days
        self.timezone = ZoneInfo(timezone)

    def today(self) -> date:
        """Current date in the report timezone"""
        return datetime.now(self.timezone).date()

    def window(self, today: Optional[date] = None) -> Tuple[date, date]:
        """(today, today + window_days), both inclusive"""
        start = today or self.today()
        return start, start + timedelta(days=self.window_days)

    def run(self, today: Optional[date] = None) -> List[Order]:
        """
        Orders with delivery date inside the window, ascending by date

        Each order carries its line items and customer contact fields.
        """
        start, end = self.window(today)
        orders = self.orders.find_by_delivery_range(start, end)
        logger.info(f"Delivery window {start} - {end}: {len(orders)} orders")
        return orders


@dataclass
class DailyReportResult:
    window_start: date
    window_end: date
    orders_count: int
    sent: bool


async def send_daily_report(
    query: DeliveryWindowQuery,
    notifier: MailNotificationDispatcher,
    today: Optional[date] = None,
) -> DailyReportResult:
    """
    Run the delivery-window query and mail the result to staff

    Query errors propagate; a failed send is reported in the result.
    """
    start, end = query.window(today)
    orders = query.run(start)

    sent = await notifier.send_daily_report(orders, start, query.window_days)
    if sent:
        logger.info(f"Daily report sent ({len(orders)} orders)")
    else:
        logger.warning(f"Daily report not sent ({len(orders)} orders)")

    return DailyReportResult(
        window_start=start,
        window_end=end,
        orders_count=len(orders),
        sent=sent,
    )
