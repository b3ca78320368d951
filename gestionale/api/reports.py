"""
Reports API - Daily delivery report
Designed to be called by cron-job.org or similar services

Endpoints:
- GET  /api/v1/reports/deliveries  - Orders due in the delivery window (read-only)
- POST /api/v1/reports/daily       - Build and mail the daily report (requires API key)

Security:
- POST requires X-Report-Key header matching REPORT_API_KEY when configured
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel

from gestionale.api.dependencies import get_delivery_window_query, get_notifier
from gestionale.core.config import settings
from gestionale.services.notification_service import MailNotificationDispatcher
from gestionale.services.report_service import DeliveryWindowQuery, send_daily_report

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


# ============================================================================
# Security - API Key Verification
# ============================================================================

async def verify_report_key(x_report_key: str = Header(None, alias="X-Report-Key")):
    """
    Verify the report API key from X-Report-Key header.

    If REPORT_API_KEY is not configured, allows all requests (development).
    If configured, requires matching key.
    """
    if not settings.REPORT_API_KEY:
        logger.warning("REPORT_API_KEY not configured - report endpoint is unprotected!")
        return

    if not x_report_key:
        logger.warning("Report request without X-Report-Key header")
        raise HTTPException(
            status_code=401,
            detail="Missing X-Report-Key header. Authentication required."
        )

    if x_report_key != settings.REPORT_API_KEY:
        logger.warning("Invalid report key attempt")
        raise HTTPException(status_code=401, detail="Invalid API key")


# ============================================================================
# Response Models
# ============================================================================

class DailyReportResponse(BaseModel):
    """Response model for the daily report run"""
    success: bool
    window_start: date
    window_end: date
    orders_count: int


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/deliveries")
async def get_deliveries(
    today: Optional[date] = Query(None, description="Window start (YYYY-MM-DD), default today in report timezone"),
    query: DeliveryWindowQuery = Depends(get_delivery_window_query),
):
    """
    Orders with delivery date in [today, today + window], ascending
    """
    try:
        start, end = query.window(today)
        orders = query.run(start)
    except Exception as e:
        logger.error(f"Error fetching delivery window: {e}")
        raise HTTPException(status_code=500, detail=f"Errore nel recupero degli ordini in scadenza: {str(e)}")

    return {
        "status": "success",
        "window_start": start.isoformat(),
        "window_end": end.isoformat(),
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }


@router.post("/daily", response_model=DailyReportResponse, dependencies=[Depends(verify_report_key)])
async def run_daily_report(
    query: DeliveryWindowQuery = Depends(get_delivery_window_query),
    notifier: MailNotificationDispatcher = Depends(get_notifier),
):
    """
    Send the daily delivery report to staff

    Meant to be triggered once a day (08:00 Europe/Rome).
    """
    try:
        result = await send_daily_report(query, notifier)
    except Exception as e:
        logger.error(f"Daily report failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return DailyReportResponse(
        success=result.sent,
        window_start=result.window_start,
        window_end=result.window_end,
        orders_count=result.orders_count,
    )
