"""
Orders API Endpoints
Order placement, lookup and status changes

Domain errors (OrderError) propagate to the handler registered in
gestionale.main, which answers with their own status code.
"""
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from gestionale.api.dependencies import get_notifier, get_order_service
from gestionale.core.exceptions import OrderError
from gestionale.domain.order import OrderCreate, OrderStatusUpdate
from gestionale.services.notification_service import MailNotificationDispatcher, dispatch_order_notifications
from gestionale.services.order_service import OrderService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", status_code=201)
async def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
    notifier: MailNotificationDispatcher = Depends(get_notifier),
):
    """
    Place an order

    Returns the committed order with customer and priced items. Customer
    confirmation and staff alert are sent after the response; their failure
    does not affect it.
    """
    try:
        order = service.create_order(payload)
    except OrderError:
        raise
    except Exception as e:
        logger.exception("Error creating order")
        raise HTTPException(status_code=500, detail=f"Errore nella creazione dell'ordine: {str(e)}")

    background_tasks.add_task(dispatch_order_notifications, notifier, order)

    return order.to_dict()


@router.get("/")
async def get_orders(service: OrderService = Depends(get_order_service)):
    """
    Get all orders with customer and items, newest first
    """
    try:
        orders = service.list_orders()
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Errore nel recupero degli ordini: {str(e)}")

    return {
        "status": "success",
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }


@router.get("/{order_id}")
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    """Get one order with customer and items"""
    return service.get_order(order_id).to_dict()


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    """
    Change an order status

    stato must be one of: pendente, in_lavorazione, spedito, consegnato,
    annullato. Any status may follow any other.
    """
    try:
        order = service.update_status(order_id, payload.stato)
    except OrderError:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Errore nell'aggiornamento dello stato: {str(e)}")

    return order.to_dict()
