from .auth import router as auth_router
from .drive import router as drive_router

__all__ = ["auth_router", "drive_router"]
