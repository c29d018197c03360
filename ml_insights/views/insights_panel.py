"""
ML Analytics Insights panel.

Consumes the Metrics Gateway and holds the panel's display state:

    loading --(fetch ok)--> loaded
    loading --(fetch failed)--> error
    loaded / error --(refresh)--> loading

A failed fetch puts the panel in an explicit error state with a banner
message instead of silently rendering nothing; the failure is also logged.

A fetch may resolve after the panel was unmounted, or after a newer
refresh was started. Such results are stale and are discarded, so a
torn-down or superseded panel never has its state overwritten.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from ml_insights.models import (
    AnalyticsMetrics,
    MetricRow,
    PanelState,
    PanelStatus,
    PanelView,
    PredictionBadge,
)

# Configure module logger
logger = logging.getLogger(__name__)

PANEL_TITLE = "ML Analytics Insights"
LOADING_TEXT = "Loading ML insights..."
ERROR_TEXT = "ML insights are unavailable right now. Try refreshing."
PREDICTIONS_HEADING = "Latest Predictions"


class MetricsSource(Protocol):
    async def get_analytics_metrics(self) -> AnalyticsMetrics: ...


class InsightsPanel:
    """
    Panel state holder driven by mount / refresh / unmount.

    Usage:
        panel = InsightsPanel(metrics_gateway)
        await panel.mount()
        view = panel.render()
        await panel.refresh()
        panel.unmount()
    """

    def __init__(self, gateway: MetricsSource) -> None:
        self.gateway = gateway
        self._state = PanelState()
        self._mounted = False
        # Incremented per fetch; only the latest fetch may write state.
        self._generation = 0

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> PanelState:
        """Mark the panel as mounted and load metrics."""
        self._mounted = True
        return await self.refresh()

    def unmount(self) -> None:
        """Tear down the panel; in-flight fetches will be discarded."""
        self._mounted = False
        self._generation += 1

    async def refresh(self) -> PanelState:
        """
        Re-fetch metrics and update the panel state.

        Returns:
            The panel state after the fetch (unchanged if the panel is not
            mounted or the result was superseded).
        """
        if not self._mounted:
            logger.debug("Ignoring refresh on an unmounted insights panel")
            return self._state

        self._generation += 1
        generation = self._generation
        self._state = PanelState(
            status=PanelStatus.LOADING,
            metrics=self._state.metrics,
            lastUpdated=self._state.lastUpdated,
        )

        try:
            metrics = await self.gateway.get_analytics_metrics()
        except Exception as e:
            if self._is_stale(generation):
                logger.info(f"Discarding stale metrics failure: {e}")
                return self._state
            logger.error(f"Failed to load ML metrics: {e}")
            self._state = PanelState(
                status=PanelStatus.ERROR,
                error=ERROR_TEXT,
                lastUpdated=self._state.lastUpdated,
            )
            return self._state

        if self._is_stale(generation):
            logger.info("Discarding stale metrics result")
            return self._state

        self._state = PanelState(
            status=PanelStatus.LOADED,
            metrics=metrics,
            lastUpdated=datetime.now(timezone.utc),
        )
        return self._state

    def render(self) -> PanelView:
        return render_panel(self._state)

    def _is_stale(self, generation: int) -> bool:
        return not self._mounted or generation != self._generation


# =============================================================================
# Rendering
# =============================================================================

def _format_percent(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


def _format_number(value: float) -> str:
    """Format like the dashboard does: integral values without a decimal point."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def render_panel(state: PanelState) -> PanelView:
    """
    Render a panel state into its view-model.

    - loading: loading text only
    - error: error banner only
    - loaded: latest predictions (when any) and the three headline rows
    """
    if state.status == PanelStatus.LOADING:
        return PanelView(title=PANEL_TITLE, status=state.status, message=LOADING_TEXT)

    metrics: Optional[AnalyticsMetrics] = state.metrics
    if state.status == PanelStatus.ERROR or metrics is None:
        return PanelView(
            title=PANEL_TITLE,
            status=PanelStatus.ERROR,
            message=state.error or ERROR_TEXT,
        )

    badges = [
        PredictionBadge(
            leadScoreLabel=f"Lead Score: {_format_percent(prediction.leadScore)}",
            confidenceLabel=f"Confidence: {_format_percent(prediction.confidence)}",
            factors=list(prediction.factors),
        )
        for prediction in metrics.predictions
    ]

    return PanelView(
        title=PANEL_TITLE,
        status=PanelStatus.LOADED,
        predictionsHeading=PREDICTIONS_HEADING if badges else None,
        predictions=badges,
        rows=[
            MetricRow(label="Real-time Users", value=_format_number(metrics.realtimeUsers)),
            MetricRow(label="Conversion Rate", value=f"{_format_number(metrics.conversionRate)}%"),
            MetricRow(label="Average Engagement", value=_format_number(metrics.averageEngagement)),
        ],
    )
