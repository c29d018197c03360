"""
Settings and environment management for the ML Insights backend.

Configuration is loaded by pydantic-settings from environment variables and
an optional .env file.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for local development (in-memory clients)
- Singleton access via @lru_cache

Environment Variables:
- GCP_PROJECT_ID (or NEXT_PUBLIC_GCP_PROJECT_ID): Project for BigQuery and Vertex AI
- VERTEX_LOCATION: Vertex AI region (default: us-central1)
- VERTEX_ENDPOINT_ID: Hosted lead-scoring model endpoint
- BIGQUERY_DATASET / SESSION_TABLE / PREDICTION_TABLE: Warehouse tables
- CLIENT_BACKEND: 'gcp' for real clients, 'fake' for in-memory clients

Usage:
    from ml_insights.core.config import get_settings

    settings = get_settings()
    project = settings.gcp_project_id
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ml_insights.models.enums import ClientBackend


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        gcp_project_id: GCP project hosting the warehouse and the model endpoint.
        vertex_location: Vertex AI region of the model endpoint.
        vertex_endpoint_id: Endpoint ID (or full resource name) of the scoring model.
        bigquery_dataset: Dataset holding the session and prediction tables.
        session_table: Session-event table queried for realtime aggregates.
        prediction_table: Prediction log table queried for recent predictions.
        client_backend: Which client implementations to wire at startup.
        realtime_window_minutes: Trailing window for the session aggregate.
        prediction_window_hours: Trailing window for the prediction log.
        prediction_log_limit: Maximum number of stored predictions returned.
        cors_origins: Origins allowed to call the API from a browser.
        log_level: Root logging level.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Google Cloud
    # =========================================================================

    # The dashboard front-end exposes the same project under its
    # NEXT_PUBLIC_ prefix; accept either so one .env can serve both.
    gcp_project_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('gcp_project_id', 'next_public_gcp_project_id'),
    )

    vertex_location: str = 'us-central1'

    vertex_endpoint_id: str = 'lead-scoring'

    # =========================================================================
    # Warehouse Tables
    # =========================================================================

    bigquery_dataset: str = 'analytics'

    session_table: str = 'user_sessions'

    prediction_table: str = 'ml_predictions'

    # =========================================================================
    # Client Selection
    # =========================================================================

    # 'fake' keeps local development and CI free of cloud credentials.
    # Production deployments set CLIENT_BACKEND=gcp.
    client_backend: ClientBackend = ClientBackend.FAKE

    # =========================================================================
    # Query Windows
    # =========================================================================

    realtime_window_minutes: int = Field(default=15, gt=0)

    prediction_window_hours: int = Field(default=1, gt=0)

    prediction_log_limit: int = Field(default=5, gt=0)

    # =========================================================================
    # HTTP / Logging
    # =========================================================================

    cors_origins: List[str] = [
        'http://localhost:3000',  # Next.js dev server
        'http://127.0.0.1:3000',
    ]

    log_level: str = 'INFO'


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If an environment variable has an invalid value.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
