"""
Customers API Endpoints
Only the per-customer order listing lives in this service
"""
from fastapi import APIRouter, Depends, HTTPException

from gestionale.api.dependencies import get_order_service
from gestionale.services.order_service import OrderService

router = APIRouter()


@router.get("/{customer_id}/orders")
async def get_customer_orders(customer_id: int, service: OrderService = Depends(get_order_service)):
    """All orders of a customer, newest first"""
    try:
        orders = service.list_customer_orders(customer_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Errore nel recupero degli ordini del cliente: {str(e)}")

    return {
        "status": "success",
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }
