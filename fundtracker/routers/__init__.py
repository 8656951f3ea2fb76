"""API routers."""

from fundtracker.routers.exits import router as exits_router
from fundtracker.routers.investments import router as investments_router

__all__ = ["exits_router", "investments_router"]
