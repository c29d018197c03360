"""
Core infrastructure package for the ML Insights backend.

Provides:
- Configuration management via pydantic-settings
- Warehouse / model client interfaces with BigQuery and Vertex AI
  implementations, selected by configuration

FastAPI dependencies live in ml_insights.core.dependencies and are imported
from there directly, since they depend on the services layer.

Usage Examples:
    from ml_insights.core import get_settings, create_warehouse_client

    settings = get_settings()
    warehouse = create_warehouse_client(settings)
"""

from ml_insights.core.config import Settings, get_settings

from ml_insights.core.clients import (
    WarehouseClient,
    ModelClient,
    BigQueryWarehouseClient,
    VertexModelClient,
    create_warehouse_client,
    create_model_client,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # External clients (from clients.py)
    'WarehouseClient',
    'ModelClient',
    'BigQueryWarehouseClient',
    'VertexModelClient',
    'create_warehouse_client',
    'create_model_client',
]
