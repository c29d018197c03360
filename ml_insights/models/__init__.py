"""
Package initialization file for ML Insights models.

Re-exports all Pydantic schemas and enumerations so other modules can
import them from ml_insights.models directly.
"""

from ml_insights.models.enums import (
    ClientBackend,
    PanelStatus,
)

from ml_insights.models.schemas import (
    # Prediction records
    MLPrediction,
    AnalyticsMetrics,
    # Feature input
    RecentActivity,
    Demographics,
    Interactions,
    UserFeatureInput,
    # Hosted model response
    ModelPredictionEntry,
    ModelPredictionEnvelope,
    # Panel
    PanelState,
    PredictionBadge,
    MetricRow,
    PanelView,
    # Errors
    ErrorResponse,
)

__all__ = [
    'ClientBackend',
    'PanelStatus',
    'MLPrediction',
    'AnalyticsMetrics',
    'RecentActivity',
    'Demographics',
    'Interactions',
    'UserFeatureInput',
    'ModelPredictionEntry',
    'ModelPredictionEnvelope',
    'PanelState',
    'PredictionBadge',
    'MetricRow',
    'PanelView',
    'ErrorResponse',
]
