"""Logistics API package."""

from logistics.api.errors import register_error_handlers
from logistics.api.routes import delivery_router, user_router

__all__ = ["delivery_router", "register_error_handlers", "user_router"]
