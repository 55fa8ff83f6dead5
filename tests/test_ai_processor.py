import base64

import pytest

from dpp_backend import ai_processor
from dpp_backend.ai_processor import (
    AIFlowError,
    check_product_compliance,
    generate_csrd_summary,
    generate_product_image,
    map_eprel_status,
    suggest_sustainability_claims,
    sync_eprel_data,
)
from dpp_backend.config import settings
from dpp_backend.models import (
    ClaimSuggestionInput,
    ComplianceCheckInput,
    CsrdSummaryInput,
    EprelSyncInput,
    EprelSyncOutput,
    EprelSyncStatus,
    ImageGenerationInput,
)


@pytest.fixture(autouse=True)
def mock_backend(monkeypatch):
    monkeypatch.setattr(settings, "AI_BACKEND", "mock")


def test_eprel_status_mapping():
    assert map_eprel_status(EprelSyncStatus.SYNCED) == "compliant"
    assert map_eprel_status(EprelSyncStatus.NOT_FOUND) == "not_applicable"
    assert map_eprel_status(EprelSyncStatus.DATA_MISMATCH) == "pending_review"
    assert map_eprel_status(EprelSyncStatus.ERROR) == "pending_review"


def test_eprel_sync_without_model_number():
    out = sync_eprel_data(EprelSyncInput(product_id="USER_PROD1", product_name="Kettle", model_number="N/A"))
    assert out.sync_status == EprelSyncStatus.NOT_FOUND
    assert out.eprel_id is None


def test_eprel_sync_is_stable_per_model():
    a = sync_eprel_data(EprelSyncInput(product_id="P1", product_name="Fridge", model_number="x2000-eco"))
    b = sync_eprel_data(EprelSyncInput(product_id="P2", product_name="Other", model_number="X2000-ECO"))
    assert a.sync_status == EprelSyncStatus.SYNCED
    assert a.eprel_id.startswith("EPREL-")
    assert a.eprel_id == b.eprel_id


def test_eprel_output_accepts_wire_status():
    out = EprelSyncOutput.model_validate({"syncStatus": "Data Mismatch", "lastChecked": "2024-07-01"})
    assert out.sync_status == EprelSyncStatus.DATA_MISMATCH


def test_generated_image_is_data_uri():
    out = generate_product_image(ImageGenerationInput(product_name="Eco <Tee>", product_category="Textiles"))
    assert out.image_url.startswith("data:image/svg+xml;base64,")
    svg = base64.b64decode(out.image_url.split(",", 1)[1]).decode("utf-8")
    assert "Eco &lt;Tee&gt;" in svg


def test_claims_from_materials():
    out = suggest_sustainability_claims(ClaimSuggestionInput(
        product_category="Textiles",
        product_name="Eco Tee",
        materials="Organic Cotton 60%, Recycled Polyester 40%",
    ))
    assert "Made with recycled materials" in out.claims
    assert "Contains certified organic materials" in out.claims
    assert "Battery designed for safe removal and recycling" not in out.claims


def test_claims_are_capped_at_five():
    out = suggest_sustainability_claims(ClaimSuggestionInput(
        product_category="Electronics",
        product_name="Modular LED lamp",
        product_description="Energy efficient, mercury-free, replaceable parts",
        materials="Recycled aluminium, organic fibre, bio-based casing, glass",
    ))
    assert len(out.claims) == 5


def test_compliance_check_for_battery_end_of_life():
    out = check_product_compliance(ComplianceCheckInput(
        product_id="PROD002",
        current_lifecycle_stage_name="Use & Maintenance",
        new_lifecycle_stage_name="Battery EOL",
        product_category="Electronics",
    ))
    assert out.new_lifecycle_stage_name == "Battery EOL"
    assert out.simulated_overall_status == "Pending Documentation"
    assert "PROD002" in out.simulated_report


def test_compliance_check_for_distribution():
    out = check_product_compliance(ComplianceCheckInput(
        product_id="PROD001",
        current_lifecycle_stage_name="Manufacturing",
        new_lifecycle_stage_name="Distribution",
        product_category="Appliances",
    ))
    assert out.simulated_overall_status == "Compliant"


def test_csrd_summary_mentions_company_and_total():
    out = generate_csrd_summary(CsrdSummaryInput(
        company_name="Acme",
        reporting_period="Q1 2024",
        total_emissions=7500,
        key_sustainability_initiatives=["Solar roof"],
    ))
    assert "Acme" in out.summary_text
    assert "7,500 tCO2e" in out.summary_text
    assert "- Solar roof" in out.summary_text


def test_openai_reply_without_json_raises(monkeypatch):
    monkeypatch.setattr(settings, "AI_BACKEND", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")

    class _Message:
        content = "Sorry, I cannot help with that."

    class _Choice:
        message = _Message()

    class _Response:
        choices = [_Choice()]

    class _Completions:
        def create(self, **kwargs):
            return _Response()

    class _Client:
        class chat:
            completions = _Completions()

    monkeypatch.setattr(ai_processor, "_openai_client", lambda: _Client())
    with pytest.raises(AIFlowError):
        suggest_sustainability_claims(ClaimSuggestionInput(product_name="Tee"))


def test_openai_reply_with_wrong_shape_raises(monkeypatch):
    monkeypatch.setattr(ai_processor, "_openai_json", lambda prompt: {"unexpected": True})
    monkeypatch.setattr(settings, "AI_BACKEND", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    with pytest.raises(AIFlowError):
        generate_csrd_summary(CsrdSummaryInput(company_name="Acme", reporting_period="2024", total_emissions=1))
