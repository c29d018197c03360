"""
Pydantic request/response models for the ML Insights backend.

This module provides type-safe validation and serialization for every
contract the service exposes or consumes:

- Prediction records (MLPrediction) shared by live model calls and the
  stored prediction log
- The headline metrics snapshot (AnalyticsMetrics) rendered by the panel
- The unvalidated user feature bag (UserFeatureInput) sent for scoring
- The hosted model's response envelope (ModelPredictionEnvelope)
- Panel state and the rendered panel view-model

Field names are camelCase to match the dashboard's TypeScript types, so
API responses can be consumed by the front-end without remapping.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ml_insights.models.enums import PanelStatus


# =============================================================================
# Prediction Records
# =============================================================================


class MLPrediction(BaseModel):
    """
    Normalized lead-scoring prediction.

    Produced either from a live hosted-model call or read back from the
    prediction log table; both origins map to this same shape.

    `factors` are heuristic, human-readable drivers. Their order is display
    order only and carries no priority.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "leadScore": 0.85,
                "confidence": 0.92,
                "factors": ["High page engagement", "Enterprise prospect"]
            }
        }
    )

    leadScore: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Predicted propensity to convert (0-1)"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Model confidence in the lead score (0-1)"
    )
    factors: List[str] = Field(
        default_factory=list,
        description="Heuristic contributing factors in display order"
    )


class AnalyticsMetrics(BaseModel):
    """
    Headline analytics snapshot for the insights panel.

    Built fresh on every Metrics Gateway call and never persisted here;
    the warehouse is the system of record.

    Headline values that were missing or unparseable in the warehouse
    response are reported as 0 and listed in `defaultedFields`.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "realtimeUsers": 150,
                "conversionRate": 2.8,
                "averageEngagement": 4.2,
                "predictions": [],
                "defaultedFields": []
            }
        }
    )

    realtimeUsers: int = Field(
        ...,
        ge=0,
        description="Distinct active sessions in the trailing realtime window"
    )
    conversionRate: float = Field(
        ...,
        ge=0.0,
        description="Mean conversion rate, as a percentage"
    )
    averageEngagement: float = Field(
        ...,
        ge=0.0,
        description="Mean engagement score"
    )
    predictions: List[MLPrediction] = Field(
        default_factory=list,
        description="Most recent stored predictions, newest first"
    )
    defaultedFields: List[str] = Field(
        default_factory=list,
        description="Headline fields that fell back to 0 because the warehouse value was missing"
    )


# =============================================================================
# User Feature Input
# =============================================================================


class RecentActivity(BaseModel):
    """Recent on-site activity counts."""
    model_config = ConfigDict(extra="allow")

    pageViews: Optional[Any] = Field(default=None, description="Page views in the recent window")


class Demographics(BaseModel):
    """Firmographic attributes."""
    model_config = ConfigDict(extra="allow")

    companySize: Optional[Any] = Field(default=None, description="Employee headcount")


class Interactions(BaseModel):
    """Marketing interaction counts."""
    model_config = ConfigDict(extra="allow")

    emailClicks: Optional[Any] = Field(default=None, description="Email link clicks")


class UserFeatureInput(BaseModel):
    """
    Feature bag sent to the hosted scoring model.

    Every group and every field is optional. Field values are not
    validated or coerced: they are forwarded to the model as sent, and the
    heuristic factor rules skip values that are not numeric. Groups accept
    additional counters beyond the documented ones.
    """
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "recentActivity": {"pageViews": 10},
                "demographics": {"companySize": 200},
                "interactions": {"emailClicks": 5}
            }
        }
    )

    recentActivity: Optional[RecentActivity] = None
    demographics: Optional[Demographics] = None
    interactions: Optional[Interactions] = None


# =============================================================================
# Hosted Model Response
# =============================================================================


class ModelPredictionEntry(BaseModel):
    """Single scored entry returned by the hosted model."""
    model_config = ConfigDict(extra="allow")

    score: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)


class ModelPredictionEnvelope(BaseModel):
    """Response envelope from the hosted model; entries are in request order."""
    model_config = ConfigDict(extra="allow")

    predictions: List[ModelPredictionEntry] = Field(..., min_length=1)
    deployedModelId: Optional[str] = None


# =============================================================================
# Insights Panel
# =============================================================================


class PanelState(BaseModel):
    """Snapshot of the insights panel's state machine."""

    status: PanelStatus = PanelStatus.LOADING
    metrics: Optional[AnalyticsMetrics] = None
    error: Optional[str] = None
    lastUpdated: Optional[datetime] = None


class PredictionBadge(BaseModel):
    """Rendered prediction card."""

    leadScoreLabel: str
    confidenceLabel: str
    factors: List[str] = Field(default_factory=list)


class MetricRow(BaseModel):
    """Rendered headline metric row."""

    label: str
    value: str


class PanelView(BaseModel):
    """
    Rendered view-model for the ML Analytics Insights panel.

    `message` carries the loading text or the error banner text; it is
    None when metrics are loaded.
    """

    title: str
    status: PanelStatus
    message: Optional[str] = None
    refreshLabel: str = "Refresh"
    predictionsHeading: Optional[str] = None
    predictions: List[PredictionBadge] = Field(default_factory=list)
    rows: List[MetricRow] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body returned by the insights routes."""

    error: str = Field(..., description="Error category")
    detail: str = Field(..., description="Human-readable error description")
