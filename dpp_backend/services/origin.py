"""Provenance tracking for editable passport fields."""
import json
from typing import Any, Dict, Mapping, Optional, Tuple

from ..models import Origin

# Editable fields that carry an origin tag
ORIGIN_TRACKED_FIELDS: Tuple[str, ...] = (
    "product_name",
    "description",
    "manufacturer",
    "model_number",
    "materials",
    "sustainability_claims",
    "specifications",
    "energy_label",
    "image_url",
    "battery_chemistry",
    "state_of_health",
    "carbon_footprint_manufacturing",
    "recycled_content_percentage",
)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _is_blank(value: Any) -> bool:
    return _as_text(value).strip() == ""


def determine_origin(new_value: Any, previous_value: Any,
                     previous_origin: Optional[Origin]) -> Optional[Origin]:
    """
    Decide the origin tag of a field after a form submission.

    Re-submitting the same value keeps whatever tag the field had, so an
    untouched AI-extracted field stays AI_EXTRACTED. Clearing a filled field
    or entering a new value marks it as manual.
    """
    if _as_text(new_value) == _as_text(previous_value):
        return previous_origin
    if not _is_blank(previous_value) and _is_blank(new_value):
        return Origin.MANUAL
    if not _is_blank(new_value):
        return Origin.MANUAL
    return previous_origin


def reconcile_origins(new_values: Mapping[str, Any], snapshot_values: Mapping[str, Any],
                      snapshot_origins: Mapping[str, Origin]) -> Dict[str, Origin]:
    """
    Recompute origins for every tracked field against the edit-session snapshot.

    snapshot_values must be the values captured when the session began,
    not the live record. Fields whose origin was never set stay absent.
    """
    origins: Dict[str, Origin] = {
        k: v for k, v in snapshot_origins.items() if k not in ORIGIN_TRACKED_FIELDS
    }
    for field in ORIGIN_TRACKED_FIELDS:
        origin = determine_origin(new_values.get(field), snapshot_values.get(field), snapshot_origins.get(field))
        if origin is not None:
            origins[field] = Origin(origin)
    return origins
