"""
Enumeration definitions for the ML Insights backend.

All enums inherit from both `str` and `Enum` so they serialize cleanly in
Pydantic models and can be loaded from environment variables by
pydantic-settings.
"""

from enum import Enum


class ClientBackend(str, Enum):
    """
    Which implementation of the external clients to wire at startup.

    - gcp: BigQuery for the warehouse, Vertex AI for the hosted model
    - fake: In-memory warehouse and static model (local development, tests)
    """
    GCP = "gcp"
    FAKE = "fake"


class PanelStatus(str, Enum):
    """
    Lifecycle states of the ML Analytics Insights panel.

    - loading: A metrics fetch is in flight (initial state)
    - loaded: Metrics are present and rendered
    - error: The last fetch failed; no metrics are rendered
    """
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
