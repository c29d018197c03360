"""
Views package for the ML Insights backend.

Modules:
- insights_panel: State machine and view-model for the ML Analytics Insights panel
"""

from ml_insights.views.insights_panel import InsightsPanel, render_panel

__all__ = [
    'InsightsPanel',
    'render_panel',
]
