"""FastAPI dependency injection helpers."""

from fastapi import Request

from src.domain.lifecycle import OrderLifecycleManager


def get_order_manager(request: Request) -> OrderLifecycleManager:
    """Return the lifecycle manager built by the app lifespan."""
    return request.app.state.order_manager
