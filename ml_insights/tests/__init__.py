'''
ML Insights Backend Test Suite

Test Modules:
-------------
- test_mapping.py: Numeric coercion, stored-factor decoding, heuristic factors
- test_metrics_gateway.py: Analytics snapshot assembly and failure policy
- test_prediction_gateway.py: Request shaping, response mapping, error propagation
- test_insights_panel.py: Panel states, stale-result handling, rendering
- test_clients.py: BigQuery / Vertex AI adapters and client factories
- test_metrics_queries.py: Table references and parameterized SQL
- test_api.py: HTTP routes and error mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest ml_insights/tests/ -v
'''

__all__ = []
