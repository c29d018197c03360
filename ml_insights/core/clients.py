"""
External client interfaces and their Google Cloud implementations.

The gateways depend on two capabilities, not on concrete SDKs:

- WarehouseClient: run a SQL string and return rows as column->value dicts
- ModelClient: send feature instances to a hosted model and return its
  response envelope

Production wires BigQuery and Vertex AI; local development and tests wire
the in-memory variants from ml_insights.services.fakes. The variant is
selected by Settings.client_backend through the factory functions below,
and the resulting instances are passed to the gateways explicitly.

Both Google SDKs are blocking, so calls run in a worker thread via
asyncio.to_thread to keep the event loop free.

Usage:
    settings = get_settings()
    warehouse = create_warehouse_client(settings)
    model = create_model_client(settings)
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

from google.cloud import aiplatform
from google.cloud import bigquery

from ml_insights.core.config import Settings
from ml_insights.models.enums import ClientBackend

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Capability Interfaces
# =============================================================================

class WarehouseClient(Protocol):
    """Read-only analytical query client."""

    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Execute a query and return its rows.

        Args:
            sql: Query text with @name parameter placeholders.
            params: Values for the named parameters.
            labels: Job labels; 'query_name' identifies the query.

        Returns:
            Rows as dicts keyed by column name.

        Raises:
            Exception: Any transport, auth or query error, unchanged.
        """


class ModelClient(Protocol):
    """Hosted inference endpoint client."""

    async def predict(
        self,
        model: str,
        instances: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Score instances with the given model.

        Returns:
            Envelope with a 'predictions' list, one entry per instance.

        Raises:
            Exception: Any transport, auth or inference error, unchanged.
        """


# =============================================================================
# BigQuery Warehouse Client
# =============================================================================

def _to_query_parameter(name: str, value: Any) -> bigquery.ScalarQueryParameter:
    """Map a Python value to a typed BigQuery scalar parameter."""
    if isinstance(value, bool):
        param_type = 'BOOL'
    elif isinstance(value, int):
        param_type = 'INT64'
    elif isinstance(value, float):
        param_type = 'FLOAT64'
    elif isinstance(value, datetime):
        param_type = 'TIMESTAMP'
    elif isinstance(value, date):
        param_type = 'DATE'
    else:
        param_type = 'STRING'
        value = str(value)
    return bigquery.ScalarQueryParameter(name, param_type, value)


class BigQueryWarehouseClient:
    """WarehouseClient backed by google.cloud.bigquery."""

    def __init__(self, client: bigquery.Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "BigQueryWarehouseClient":
        """Create a client for the configured project using default credentials."""
        return cls(bigquery.Client(project=settings.gcp_project_id))

    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                _to_query_parameter(name, value)
                for name, value in (params or {}).items()
            ],
            labels=dict(labels or {}),
        )
        return await asyncio.to_thread(self._run_query, sql, job_config)

    def _run_query(self, sql: str, job_config: bigquery.QueryJobConfig) -> List[Dict[str, Any]]:
        query_job = self._client.query(sql, job_config=job_config)
        rows = [dict(row.items()) for row in query_job.result()]
        logger.debug(f"BigQuery job {query_job.job_id} returned {len(rows)} rows")
        return rows


# =============================================================================
# Vertex AI Model Client
# =============================================================================

class VertexModelClient:
    """
    ModelClient backed by a Vertex AI online prediction endpoint.

    `model` is an endpoint ID or full endpoint resource name. Endpoint
    handles are created on first use and reused.
    """

    def __init__(self, project: str, location: str) -> None:
        self.project = project
        self.location = location
        self._endpoints: Dict[str, aiplatform.Endpoint] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "VertexModelClient":
        return cls(project=settings.gcp_project_id, location=settings.vertex_location)

    async def predict(
        self,
        model: str,
        instances: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        return await asyncio.to_thread(self._predict, model, instances)

    def _predict(self, model: str, instances: List[Dict[str, Any]]) -> Dict[str, Any]:
        endpoint = self._endpoints.get(model)
        if endpoint is None:
            endpoint = aiplatform.Endpoint(
                endpoint_name=model,
                project=self.project,
                location=self.location,
            )
            self._endpoints[model] = endpoint

        response = endpoint.predict(instances=instances)
        return {
            'predictions': list(response.predictions),
            'deployedModelId': response.deployed_model_id,
        }


# =============================================================================
# Factories
# =============================================================================

def _require_project(settings: Settings) -> None:
    if not settings.gcp_project_id:
        raise ValueError(
            "GCP_PROJECT_ID must be set when CLIENT_BACKEND is 'gcp'"
        )


def create_warehouse_client(settings: Settings) -> WarehouseClient:
    """
    Build the warehouse client selected by settings.client_backend.

    Raises:
        ValueError: If the gcp backend is selected without a project ID.
    """
    if settings.client_backend == ClientBackend.GCP:
        _require_project(settings)
        logger.info(f"Using BigQuery warehouse client for project {settings.gcp_project_id}")
        return BigQueryWarehouseClient.from_settings(settings)

    from ml_insights.services.fakes import InMemoryWarehouseClient

    logger.info("Using in-memory warehouse client")
    return InMemoryWarehouseClient.with_sample_data()


def create_model_client(settings: Settings) -> ModelClient:
    """
    Build the model client selected by settings.client_backend.

    Raises:
        ValueError: If the gcp backend is selected without a project ID.
    """
    if settings.client_backend == ClientBackend.GCP:
        _require_project(settings)
        logger.info(
            f"Using Vertex AI model client ({settings.gcp_project_id}, {settings.vertex_location})"
        )
        return VertexModelClient.from_settings(settings)

    from ml_insights.services.fakes import StaticModelClient

    logger.info("Using static model client")
    return StaticModelClient()
