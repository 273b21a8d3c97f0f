"""
Dependency injection for the ordering bounded context.

Provides FastAPI dependency functions that hand out the use cases
wired by the composition root. The container lives on ``app.state``;
nothing here builds adapters or holds module-level state.
"""

from fastapi import Depends, Request

from app.application.ordering.add_item_to_order import AddItemToOrderUseCase
from app.application.ordering.create_order import CreateOrderUseCase
from app.application.ordering.delete_order import DeleteOrderUseCase
from app.application.ordering.get_order import GetOrderUseCase
from app.core.container import Container


def get_container(request: Request) -> Container:
    """Return the container of the application serving this request."""
    return request.app.state.container


def get_create_order_use_case(
    container: Container = Depends(get_container),
) -> CreateOrderUseCase:
    return container.create_order


def get_add_item_to_order_use_case(
    container: Container = Depends(get_container),
) -> AddItemToOrderUseCase:
    return container.add_item_to_order


def get_delete_order_use_case(
    container: Container = Depends(get_container),
) -> DeleteOrderUseCase:
    return container.delete_order


def get_order_use_case(
    container: Container = Depends(get_container),
) -> GetOrderUseCase:
    return container.get_order
