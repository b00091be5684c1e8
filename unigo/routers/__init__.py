"""HTTP routers for the cafeteria and marketplace channels."""
from .cafeteria import router as cafeteria_router
from .marketplace import router as marketplace_router

__all__ = ["cafeteria_router", "marketplace_router"]
