"""
ML Insights Backend Package.

FastAPI service layer behind the dashboard's ML Analytics Insights panel.
Proxies a managed query warehouse (BigQuery) and a hosted scoring model
(Vertex AI), reshaping their responses into the view-models the dashboard
renders.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, external clients, and dependencies
    - models: Pydantic schemas and enums
    - services: Metrics and prediction gateways, mapping rules, fakes
    - sql: Parameterized warehouse queries
    - views: Insights panel state and view-model rendering
"""

__version__ = "1.0.0"
