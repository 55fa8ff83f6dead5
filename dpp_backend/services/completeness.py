"""
DPP completeness scoring.

A passport is scored against ESSENTIAL_FIELDS_CONFIG: each entry names a
product attribute, the section it belongs to, an optional custom "filled"
predicate and an optional category scope. Only fields applicable to the
product's category count towards the section and overall scores.
"""
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..models import CompletenessResult, Product, SectionCompleteness

logger = logging.getLogger(__name__)

BASIC_INFO = "Basic Info"
SUSTAINABILITY = "Sustainability"
SPECIFICATIONS = "Specifications"
LIFECYCLE = "Lifecycle"
COMPLIANCE = "Compliance"
BATTERY = "Battery"

SECTIONS: Tuple[str, ...] = (BASIC_INFO, SUSTAINABILITY, SPECIFICATIONS, LIFECYCLE, COMPLIANCE, BATTERY)

BATTERY_CATEGORIES: Tuple[str, ...] = ("Electronics", "Automotive Parts", "Battery")
BATTERY_FIELDS: Tuple[str, ...] = (
    "battery_chemistry",
    "state_of_health",
    "carbon_footprint_manufacturing",
    "recycled_content_percentage",
)
PLACEHOLDER_IMAGE_MARKERS: Tuple[str, ...] = ("placehold.co", "?text=")
EMPTY_SENTINEL = "N/A"


@dataclass(frozen=True)
class FieldConfig:
    key: str
    label: str
    section: str
    check: Optional[Callable[[Product], bool]] = None
    category_scope: Optional[Tuple[str, ...]] = None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_placeholder_image(url: Optional[str]) -> bool:
    return not url or any(marker in url for marker in PLACEHOLDER_IMAGE_MARKERS)


def _has_real_image(p: Product) -> bool:
    return not is_placeholder_image(p.image_url)


def parse_specifications(value: Any, product_id: str = "") -> Dict[str, str]:
    """Return specifications as a mapping whether stored as JSON text or already structured."""
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items()}
    if not isinstance(value, str) or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except ValueError as e:
        logger.warning("Failed to parse specifications for product %s: %s", product_id, e)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Specifications for product %s are not an object; ignoring", product_id)
        return {}
    return {str(k): str(v) for k, v in parsed.items()}


def _has_specifications(p: Product) -> bool:
    return bool(parse_specifications(p.specifications, p.product_id))


ESSENTIAL_FIELDS_CONFIG: Tuple[FieldConfig, ...] = (
    FieldConfig("product_name", "Product Name", BASIC_INFO),
    FieldConfig("gtin", "GTIN", BASIC_INFO),
    FieldConfig("category", "Category", BASIC_INFO),
    FieldConfig("manufacturer", "Manufacturer", BASIC_INFO),
    FieldConfig("model_number", "Model Number", BASIC_INFO),
    FieldConfig("description", "Description", BASIC_INFO),
    FieldConfig("image_url", "Image URL", BASIC_INFO, check=_has_real_image),
    FieldConfig("materials", "Materials", SUSTAINABILITY),
    FieldConfig("sustainability_claims", "Sustainability Claims", SUSTAINABILITY),
    FieldConfig("energy_label", "Energy Label", SUSTAINABILITY, category_scope=("Appliances", "Electronics")),
    FieldConfig("specifications", "Specifications", SPECIFICATIONS, check=_has_specifications),
    FieldConfig("lifecycle_events", "Lifecycle Events", LIFECYCLE, check=lambda p: len(p.lifecycle_events or []) > 0),
    FieldConfig("compliance_data", "Compliance Data", COMPLIANCE, check=lambda p: bool(p.compliance_data)),
    FieldConfig("battery_chemistry", "Battery Chemistry", BATTERY, category_scope=BATTERY_CATEGORIES),
    FieldConfig("state_of_health", "Battery State of Health (SoH)", BATTERY,
                check=lambda p: _is_number(p.state_of_health), category_scope=BATTERY_CATEGORIES),
    FieldConfig("carbon_footprint_manufacturing", "Battery Mfg. Carbon Footprint", BATTERY,
                check=lambda p: _is_number(p.carbon_footprint_manufacturing), category_scope=BATTERY_CATEGORIES),
    FieldConfig("recycled_content_percentage", "Battery Recycled Content", BATTERY,
                check=lambda p: _is_number(p.recycled_content_percentage), category_scope=BATTERY_CATEGORIES),
)


def _category_matches(category: Optional[str], scopes: Tuple[str, ...]) -> bool:
    category_lower = (category or "").lower()
    if not category_lower:
        return False
    return any(scope.lower() in category_lower for scope in scopes)


def has_battery_data(product: Product) -> bool:
    if product.battery_chemistry and product.battery_chemistry.strip():
        return True
    return any(getattr(product, key) is not None for key in BATTERY_FIELDS[1:])


def is_field_applicable(field: FieldConfig, product: Product) -> bool:
    # Battery fields ignore their own scope: a battery category or any
    # battery value already entered makes the whole section count.
    if field.section == BATTERY:
        return _category_matches(product.category, BATTERY_CATEGORIES) or has_battery_data(product)
    if field.category_scope:
        return _category_matches(product.category, field.category_scope)
    return True


def is_field_filled(field: FieldConfig, product: Product) -> bool:
    if field.check is not None:
        return bool(field.check(product))

    value = getattr(product, field.key, None)
    if isinstance(value, (Mapping, list, tuple)):
        return len(value) > 0
    if value is None:
        return False
    text = str(value).strip()
    return text != "" and text != EMPTY_SENTINEL


def _percent(filled: int, total: int) -> int:
    if total <= 0:
        return 100
    # half-up, matching Math.round for non-negative values
    return int(math.floor(filled / total * 100 + 0.5))


def calculate_dpp_completeness(product: Product,
                               fields: Tuple[FieldConfig, ...] = ESSENTIAL_FIELDS_CONFIG) -> CompletenessResult:
    sections: Dict[str, Dict[str, Any]] = {
        name: {"filled": 0, "total": 0, "missing": []} for name in SECTIONS
    }
    overall_filled = 0
    overall_total = 0

    for field in fields:
        if not is_field_applicable(field, product):
            continue
        bucket = sections.setdefault(field.section, {"filled": 0, "total": 0, "missing": []})
        bucket["total"] += 1
        overall_total += 1
        if is_field_filled(field, product):
            bucket["filled"] += 1
            overall_filled += 1
        else:
            bucket["missing"].append(field.label)

    section_results: List[SectionCompleteness] = [
        SectionCompleteness(
            section_name=name,
            score=_percent(data["filled"], data["total"]),
            filled_fields=data["filled"],
            total_fields=data["total"],
            missing_fields_in_section=list(data["missing"]),
        )
        for name, data in sections.items()
        if data["total"] > 0
    ]

    return CompletenessResult(
        overall_score=_percent(overall_filled, overall_total),
        overall_filled_fields=overall_filled,
        overall_total_fields=overall_total,
        sections=section_results,
    )
