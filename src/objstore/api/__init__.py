"""API routers for objstore."""

from objstore.api.objects import router as objects_router

__all__ = ["objects_router"]
