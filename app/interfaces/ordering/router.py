"""
FastAPI router for the ordering bounded context.

All routes delegate to use cases. No business logic here.
Use cases return results instead of raising; a failed result is
translated to an HTTP response by the centralized error mapping.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from app.application.ordering.add_item_to_order import AddItemToOrderUseCase
from app.application.ordering.create_order import CreateOrderUseCase
from app.application.ordering.delete_order import DeleteOrderUseCase
from app.application.ordering.dtos import (
    AddItemToOrderCommand,
    CreateOrderCommand,
    DeleteOrderCommand,
    GetOrderQuery,
)
from app.application.ordering.get_order import GetOrderUseCase
from app.interfaces.ordering.dependencies import (
    get_add_item_to_order_use_case,
    get_create_order_use_case,
    get_delete_order_use_case,
    get_order_use_case,
)
from app.interfaces.ordering.schemas import (
    AddItemRequest,
    AddItemResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    ErrorResponse,
    MoneySchema,
    OrderItemSchema,
    OrderResponse,
)
from app.shared.errors.handlers import app_error_response

router = APIRouter(prefix="/orders", tags=["orders"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=CreateOrderResponse,
    responses=ERROR_RESPONSES,
    summary="Create an order",
    description="Create a pending order for a customer with at least one item.",
)
async def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> CreateOrderResponse | JSONResponse:
    """Create an order and stage its order.created event."""
    command = CreateOrderCommand(
        customer_id=request.customer_id,
        items=[item.model_dump() for item in request.items],
        order_id=request.order_id,
    )
    result = await use_case.execute(command)
    if not result.ok:
        return app_error_response(result.error)
    return CreateOrderResponse(order_id=result.value.order_id, total=result.value.total)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    summary="Get an order",
)
async def get_order(
    order_id: str,
    use_case: GetOrderUseCase = Depends(get_order_use_case),
) -> OrderResponse | JSONResponse:
    result = await use_case.execute(GetOrderQuery(order_id=order_id))
    if not result.ok:
        return app_error_response(result.error)
    view = result.value
    return OrderResponse(
        order_id=view.order_id,
        customer_id=view.customer_id,
        status=view.status,
        items=[
            OrderItemSchema(
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
                metadata=item.metadata,
            )
            for item in view.items
        ],
        total=view.total,
        created_at=view.created_at,
        updated_at=view.updated_at,
        metadata=view.metadata,
        version=view.version,
    )


@router.post(
    "/{order_id}/items",
    response_model=AddItemResponse,
    responses=ERROR_RESPONSES,
    summary="Add an item to an order",
    description=(
        "Add units of a SKU to an order. The unit price is looked up "
        "from the pricing service unless given explicitly."
    ),
)
async def add_item_to_order(
    order_id: str,
    request: AddItemRequest,
    use_case: AddItemToOrderUseCase = Depends(get_add_item_to_order_use_case),
) -> AddItemResponse | JSONResponse:
    """Add an item and return the new order total."""
    command = AddItemToOrderCommand(
        order_id=order_id,
        sku=request.sku,
        qty=request.qty,
        currency=request.currency,
        unit_price=request.unit_price,
    )
    result = await use_case.execute(command)
    if not result.ok:
        return app_error_response(result.error)
    return AddItemResponse(
        order_id=result.value.order_id,
        total=MoneySchema(
            amount=result.value.total.amount,
            currency=result.value.total.currency,
        ),
    )


@router.delete(
    "/{order_id}",
    status_code=204,
    response_class=Response,
    responses=ERROR_RESPONSES,
    summary="Delete an order",
    description="Delete an order regardless of its status.",
)
async def delete_order(
    order_id: str,
    use_case: DeleteOrderUseCase = Depends(get_delete_order_use_case),
) -> Response:
    result = await use_case.execute(DeleteOrderCommand(order_id=order_id))
    if not result.ok:
        return app_error_response(result.error)
    return Response(status_code=204)
