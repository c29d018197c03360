"""
Backend API package initialization.

Router modules:
- insights: ML Analytics Insights metrics, predictions and panel endpoints
"""

from ml_insights.api.insights import router as insights_router

__all__ = [
    "insights_router",
]
