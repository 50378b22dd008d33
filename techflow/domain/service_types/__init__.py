"""Service types domain"""

from .router import router
from .skills_router import router as skills_router

__all__ = ["router", "skills_router"]
