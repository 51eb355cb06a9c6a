"""
Router package for the plan engine API.

This package contains all API routers organized by domain:
- health: Health check endpoint
- navigation: Workout plan display and athlete navigation
- blocks: Block, variant and session schedule editing
"""

from api.routers.blocks import router as blocks_router
from api.routers.health import router as health_router
from api.routers.navigation import router as navigation_router

__all__ = [
    "blocks_router",
    "health_router",
    "navigation_router",
]
