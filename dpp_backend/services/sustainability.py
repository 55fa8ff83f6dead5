from typing import Any, Dict, List

from .. import ai_processor
from ..models import CsrdSummaryInput, CsrdSummaryOutput

COMPANY_NAME = "Norruva Demo Corp"
EMISSION_UNIT = "tCO2e"

# Annual scope 1/2/3 figures in tCO2e
EMISSION_DATA: Dict[str, float] = {
    "scope1": 1200,
    "scope2": 800,
    "scope3": 5500,
}

REPORTS: List[Dict[str, str]] = [
    {"id": "CSRD2023Q4", "title": "CSRD Report - Q4 2023", "date": "2024-01-15", "status": "Published"},
    {"id": "CSRD2024Q1", "title": "CSRD Report - Q1 2024", "date": "2024-04-15", "status": "Published"},
    {"id": "CSRD2024Q2", "title": "CSRD Report - Q2 2024", "date": "2024-07-15", "status": "Draft"},
]

KEY_INITIATIVES: List[str] = [
    "Reduced Scope 1 emissions by 5% through operational efficiencies.",
    "Increased renewable energy sourcing to 35% of total consumption.",
    "Launched a product line using 70% recycled materials.",
    "Partnered with suppliers to improve supply chain transparency for Scope 3 emissions.",
]


def total_emissions() -> float:
    return sum(EMISSION_DATA.values())


def emissions_overview() -> Dict[str, Any]:
    total = total_emissions()
    scopes = [
        {
            "scope": name,
            "value": value,
            "unit": EMISSION_UNIT,
            "share": round(value / total * 100, 1) if total else 0.0,
        }
        for name, value in EMISSION_DATA.items()
    ]
    return {"total": total, "unit": EMISSION_UNIT, "scopes": scopes, "reports": REPORTS}


def build_csrd_summary_input(reporting_period: str = "Annual 2024") -> CsrdSummaryInput:
    return CsrdSummaryInput(
        company_name=COMPANY_NAME,
        reporting_period=reporting_period,
        total_emissions=total_emissions(),
        emission_unit=EMISSION_UNIT,
        key_sustainability_initiatives=list(KEY_INITIATIVES),
    )


def generate_report(reporting_period: str = "Annual 2024") -> CsrdSummaryOutput:
    return ai_processor.generate_csrd_summary(build_csrd_summary_input(reporting_period))
