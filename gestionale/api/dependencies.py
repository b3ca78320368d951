"""
FastAPI dependencies

Services are built per request from a connection factory, so tests can
override any of these with app.dependency_overrides.
"""
from typing import Callable

from fastapi import Depends

from gestionale.core.config import settings
from gestionale.core.database import get_db_connection_dict
from gestionale.repositories.order_repository import OrderRepository
from gestionale.services.notification_service import MailNotificationDispatcher
from gestionale.services.order_service import OrderService
from gestionale.services.report_service import DeliveryWindowQuery


def get_connection_factory() -> Callable:
    return get_db_connection_dict


def get_order_service(connection_factory: Callable = Depends(get_connection_factory)) -> OrderService:
    return OrderService(connection_factory)


def get_notifier() -> MailNotificationDispatcher:
    return MailNotificationDispatcher.from_settings(settings)


def get_delivery_window_query(
    connection_factory: Callable = Depends(get_connection_factory),
) -> DeliveryWindowQuery:
    return DeliveryWindowQuery(
        OrderRepository(connection_factory),
        window_days=settings.REPORT_WINDOW_DAYS,
        timezone=settings.REPORT_TIMEZONE,
    )
