"""
Order endpoints
===============

POST  /orders            -- create an order (distance looked up first)
GET   /orders            -- list orders, ``?page=<window index>&limit=<n>``
PATCH /orders/{order_id} -- take an order; at most one caller succeeds
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from src.api.dependencies import get_order_manager
from src.api.middleware import limiter
from src.api.schemas import (
    CreateOrderRequest,
    ErrorResponse,
    OrderResponse,
    StatusResponse,
    TakeOrderRequest,
)
from src.config import settings
from src.domain.lifecycle import MAX_ROW_INDEX, OrderLifecycleManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    summary="Create an order",
    responses={
        400: {"model": ErrorResponse, "description": "Malformed origin/destination."},
        502: {"model": ErrorResponse, "description": "Distance lookup failed."},
    },
)
@limiter.limit(settings.rate_limit)
async def create_order(
    request: Request,
    body: CreateOrderRequest,
    manager: OrderLifecycleManager = Depends(get_order_manager),
):
    return await manager.create(body.origin_location(), body.destination_location())


@router.get(
    "",
    response_model=list[OrderResponse],
    summary="List orders",
    description=(
        "``page`` is a zero-based window index; the window starts at row "
        "``page * limit`` in ascending id order.  A page past the end "
        "returns an empty list."
    ),
)
@limiter.limit(settings.rate_limit)
async def list_orders(
    request: Request,
    page: int = Query(0, ge=0, le=MAX_ROW_INDEX),
    limit: Optional[int] = Query(None, ge=0, le=MAX_ROW_INDEX),
    manager: OrderLifecycleManager = Depends(get_order_manager),
):
    orders = await manager.list_orders(page, limit)
    logger.info("GET /orders 200 page=%d limit=%s count=%d", page, limit, len(orders))
    return orders


@router.patch(
    "/{order_id}",
    response_model=StatusResponse,
    summary="Take an order",
    responses={
        404: {"model": ErrorResponse, "description": "No such order."},
        409: {"model": ErrorResponse, "description": "Order already taken."},
    },
)
@limiter.limit(settings.rate_limit)
async def take_order(
    request: Request,
    order_id: int = Path(..., le=MAX_ROW_INDEX),
    body: Optional[TakeOrderRequest] = None,
    manager: OrderLifecycleManager = Depends(get_order_manager),
):
    await manager.claim(order_id)
    return StatusResponse()
