"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.
"""
from gestionale.domain.product import Product
from gestionale.domain.customer import Customer, CustomerCreate
from gestionale.domain.order import (
    Order,
    OrderItem,
    OrderCustomer,
    OrderStatus,
    OrderCreate,
    OrderStatusUpdate,
    CartItem,
)

__all__ = [
    'Product',
    'Customer',
    'CustomerCreate',
    'Order',
    'OrderItem',
    'OrderCustomer',
    'OrderStatus',
    'OrderCreate',
    'OrderStatusUpdate',
    'CartItem',
]
