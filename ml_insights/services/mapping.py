"""
Shared mapping rules for warehouse rows, model responses and user features.

- coerce_number / coerce_metric: defensive numeric coercion for warehouse values
- decode_factors: decode the prediction log's stored factors column
- derive_factors: fixed heuristic rules that label a feature bag with
  human-readable contributing factors

The headline metrics follow a lossy policy: a missing or unparseable value
becomes 0 rather than an "unknown" marker, so the panel never shows a
placeholder. Callers record which fields were defaulted.
"""

import json
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ml_insights.services.errors import MalformedDataError


# =============================================================================
# FACTOR RULES
# =============================================================================

# (feature group, field, strict lower bound, label). Evaluated in this order.
FACTOR_RULES: Sequence[Tuple[str, str, float, str]] = (
    ('recentActivity', 'pageViews', 5, 'High page engagement'),
    ('interactions', 'emailClicks', 2, 'Active email engagement'),
    ('demographics', 'companySize', 100, 'Enterprise prospect'),
)

FEATURE_GROUPS: Tuple[str, ...] = ('recentActivity', 'demographics', 'interactions')


# =============================================================================
# NUMERIC COERCION
# =============================================================================

def coerce_number(value: Any) -> Optional[float]:
    """
    Parse a warehouse or feature value as a finite float.

    Accepts ints, floats, Decimals (BigQuery NUMERIC) and numeric strings.

    Returns:
        The parsed value, or None when the value is missing, non-numeric,
        NaN or infinite.
    """
    if value is None or isinstance(value, bool) or not pd.api.types.is_scalar(value):
        return None

    parsed = pd.to_numeric(value, errors='coerce')
    if pd.isna(parsed):
        return None

    parsed = float(parsed)
    if not math.isfinite(parsed):
        return None
    return parsed


def coerce_metric(value: Any) -> Tuple[float, bool]:
    """
    Coerce a headline metric, falling back to 0.

    Negative values are treated like missing ones: counts and rates
    reported by the warehouse cannot be negative.

    Returns:
        Tuple of (value, defaulted) where defaulted is True when the
        fallback was applied.
    """
    parsed = coerce_number(value)
    if parsed is None or parsed < 0:
        return 0.0, True
    return parsed, False


# =============================================================================
# STORED FACTORS
# =============================================================================

def decode_factors(raw: Any) -> List[str]:
    """
    Decode the factors column of a prediction log row.

    The column is stored as JSON text (e.g. '["a","b"]'). JSON or ARRAY
    columns that the warehouse client already decoded are accepted as-is.
    NULL decodes to an empty list.

    Raises:
        MalformedDataError: If the text is not valid JSON or does not
            decode to a list of strings.
    """
    if raw is None:
        return []

    decoded = raw
    if isinstance(raw, (str, bytes)):
        try:
            decoded = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedDataError(f"Stored factors are not valid JSON: {raw!r}") from e

    if not isinstance(decoded, (list, tuple)):
        raise MalformedDataError(
            f"Stored factors must decode to a list, got {type(decoded).__name__}"
        )
    if not all(isinstance(item, str) for item in decoded):
        raise MalformedDataError(f"Stored factors must be strings: {decoded!r}")

    return list(decoded)


# =============================================================================
# HEURISTIC FACTORS
# =============================================================================

def derive_factors(features: Mapping[str, Any]) -> List[str]:
    """
    Label a raw feature bag with heuristic contributing factors.

    Rules (fixed order, each fires independently):
    - recentActivity.pageViews > 5    -> "High page engagement"
    - interactions.emailClicks > 2    -> "Active email engagement"
    - demographics.companySize > 100  -> "Enterprise prospect"

    These are presentation heuristics computed from the input, not an
    explanation of the model's score. Absent groups, absent fields and
    non-numeric values never fire.

    Args:
        features: Feature bag keyed by group name.

    Returns:
        Factor labels in rule order.
    """
    factors: List[str] = []
    for group_name, field_name, threshold, label in FACTOR_RULES:
        group = features.get(group_name)
        if not isinstance(group, Mapping):
            continue
        value = coerce_number(group.get(field_name))
        if value is not None and value > threshold:
            factors.append(label)
    return factors
