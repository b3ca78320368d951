"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.
"""
from gestionale.repositories.customer_repository import CustomerRepository
from gestionale.repositories.product_repository import ProductRepository
from gestionale.repositories.order_repository import OrderRepository

__all__ = [
    'CustomerRepository',
    'ProductRepository',
    'OrderRepository',
]
