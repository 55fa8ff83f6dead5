import base64
import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Tuple
from xml.sax.saxutils import escape

from openai import OpenAI
from pydantic import ValidationError

from .config import settings
from .models import (
    ClaimSuggestionInput,
    ClaimSuggestionOutput,
    ComplianceCheckInput,
    ComplianceCheckOutput,
    CsrdSummaryInput,
    CsrdSummaryOutput,
    EprelSyncInput,
    EprelSyncOutput,
    EprelSyncStatus,
    ImageGenerationInput,
    ImageGenerationOutput,
)
from .services.mock_data import now_iso

logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent
ROOT_DIR = APP_DIR.parent
DOCS_DIR = ROOT_DIR / settings.DATA_DIR / "regulatory_docs"

BATTERY_KEYWORDS = ("electronics", "automotive parts", "battery")


class AIFlowError(Exception):
    """An AI flow could not produce a usable result."""


def _load_regulatory_snippets() -> List[Tuple[str, str]]:
    snippets = []
    if DOCS_DIR.exists():
        for fp in sorted(DOCS_DIR.glob("*.txt")):
            with fp.open("r", encoding="utf-8") as f:
                snippets.append((fp.stem, f.read()))
    if not snippets:
        snippets = [
            ("ESPR_Article_1", "Products must contain clear material composition and recycled content."),
            ("Battery_Regulation_2023_1542", "Batteries require a battery passport with chemistry, state of health and carbon footprint."),
            ("WEEE_Directive", "Electrical equipment must provide end-of-life collection and recycling information."),
        ]
    return snippets

RAG_STORE = _load_regulatory_snippets()


def _is_battery_category(category: str) -> bool:
    category = (category or "").lower()
    return any(k in category for k in BATTERY_KEYWORDS)


# ---------- OpenAI plumbing ----------

def _openai_client() -> OpenAI:
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def _openai_json(prompt: str) -> Dict[str, Any]:
    try:
        resp = _openai_client().chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
        )
        content = resp.choices[0].message.content or ""
    except Exception as e:
        logger.error("OpenAI request failed: %s", e)
        raise AIFlowError(f"AI service request failed: {e}") from e

    match = re.search(r"{.*}", content, re.S)
    if not match:
        raise AIFlowError("AI service returned no JSON object.")
    try:
        return json.loads(match.group(0))
    except ValueError as e:
        raise AIFlowError(f"AI service returned malformed JSON: {e}") from e


def _validated(model_cls, data: Dict[str, Any]):
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise AIFlowError(f"AI service reply did not match {model_cls.__name__}: {e}") from e


# ---------- Compliance check ----------

def _references_for(text: str) -> List[str]:
    words = set(re.findall(r"[a-z]+", text.lower()))
    refs = []
    for art_id, snippet in RAG_STORE:
        snippet_words = set(re.findall(r"[a-z]{5,}", snippet.lower()))
        if words & snippet_words:
            refs.append(art_id)
    return refs[:3]


def check_product_compliance(inp: ComplianceCheckInput) -> ComplianceCheckOutput:
    """Simulate a compliance re-check when a product moves to its next lifecycle stage."""
    if settings.use_openai:
        prompt = (
            "You are an EU product compliance assistant. A product is moving between lifecycle stages.\n"
            "Return JSON with keys: newLifecycleStageName (string), simulatedOverallStatus (string, e.g. "
            "'Compliant', 'Pending Documentation', 'Non-Compliant'), simulatedReport (string, 2-4 sentences).\n\n"
            f"Input:\n{json.dumps(inp.model_dump(by_alias=True))}"
        )
        return _validated(ComplianceCheckOutput, _openai_json(prompt))

    stage = inp.new_lifecycle_stage_name.lower()
    battery = _is_battery_category(inp.product_category)
    if any(k in stage for k in ("end-of-life", "eol", "recycl")):
        status = "Pending Documentation" if battery else "Compliant"
        focus = "end-of-life collection, take-back and recycling obligations"
    elif any(k in stage for k in ("distribution", "import", "shipping")):
        status = "Compliant"
        focus = "customs documentation and transport emission reporting"
    elif any(k in stage for k in ("retail", "sale")):
        status = "Compliant"
        focus = "consumer-facing labelling and EPREL registration"
    else:
        status = "Compliant"
        focus = "general product safety and material disclosure"
    if battery and status == "Compliant" and "manufactur" in stage:
        status = "Pending Documentation"

    refs = _references_for(f"{focus} {inp.product_category} {'battery' if battery else ''}")
    report = (
        f"Product {inp.product_id} ({inp.product_category or 'uncategorised'}) moved from "
        f"'{inp.current_lifecycle_stage_name}' to '{inp.new_lifecycle_stage_name}'. "
        f"Checks focused on {focus}. Overall status: {status}."
    )
    if refs:
        report += f" References: {', '.join(refs)}."
    return ComplianceCheckOutput(
        new_lifecycle_stage_name=inp.new_lifecycle_stage_name,
        simulated_overall_status=status,
        simulated_report=report,
    )


# ---------- EPREL ----------

def map_eprel_status(sync_status: EprelSyncStatus) -> str:
    if sync_status == EprelSyncStatus.SYNCED:
        return "compliant"
    if sync_status == EprelSyncStatus.NOT_FOUND:
        return "not_applicable"
    return "pending_review"


def sync_eprel_data(inp: EprelSyncInput) -> EprelSyncOutput:
    if settings.use_openai:
        prompt = (
            "Simulate a lookup in the EU EPREL energy label database for this product.\n"
            "Return JSON with keys: syncStatus (one of 'Synced Successfully', 'Product Not Found in EPREL', "
            "'Data Mismatch', 'Error During Sync'), eprelId (string or null), lastChecked (ISO timestamp), "
            "message (string).\n\n"
            f"Input:\n{json.dumps(inp.model_dump(by_alias=True))}"
        )
        return _validated(EprelSyncOutput, _openai_json(prompt))

    model_number = (inp.model_number or "").strip()
    if not model_number or model_number == "N/A":
        return EprelSyncOutput(
            sync_status=EprelSyncStatus.NOT_FOUND,
            last_checked=now_iso(),
            message=f"No EPREL entry matches '{inp.product_name}' without a model number.",
        )
    digest = hashlib.sha1(model_number.upper().encode("utf-8")).hexdigest()[:8].upper()
    return EprelSyncOutput(
        sync_status=EprelSyncStatus.SYNCED,
        eprel_id=f"EPREL-{digest}",
        last_checked=now_iso(),
        message=f"Energy label data for model {model_number} retrieved and matched.",
    )


# ---------- Image generation ----------

def _placeholder_svg(name: str, category: str) -> str:
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="600" height="400">'
        '<rect width="100%" height="100%" fill="#e8f5e9"/>'
        f'<text x="50%" y="45%" text-anchor="middle" font-size="28" fill="#1b5e20">{escape(name)}</text>'
        f'<text x="50%" y="60%" text-anchor="middle" font-size="18" fill="#388e3c">{escape(category)}</text>'
        "</svg>"
    )
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")


def generate_product_image(inp: ImageGenerationInput) -> ImageGenerationOutput:
    if settings.use_openai:
        prompt = (
            f"Studio product photo of '{inp.product_name}'"
            + (f", a product in the {inp.product_category} category" if inp.product_category else "")
            + ", plain light background, e-commerce style."
        )
        try:
            resp = _openai_client().images.generate(
                model=settings.OPENAI_IMAGE_MODEL,
                prompt=prompt,
                size="1024x1024",
                n=1,
            )
            image = resp.data[0]
        except Exception as e:
            logger.error("Image generation failed for %s: %s", inp.product_name, e)
            raise AIFlowError(f"Image generation failed: {e}") from e
        if image.url:
            return ImageGenerationOutput(image_url=image.url)
        if image.b64_json:
            return ImageGenerationOutput(image_url=f"data:image/png;base64,{image.b64_json}")
        raise AIFlowError("Image generation returned no image.")

    return ImageGenerationOutput(image_url=_placeholder_svg(inp.product_name, inp.product_category))


# ---------- Sustainability claims ----------

CLAIM_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("recycled",), "Made with recycled materials"),
    (("organic",), "Contains certified organic materials"),
    (("bio-based", "bio based", "biopolymer", "bio-polymer", "pla", "pha"), "Uses bio-based materials"),
    (("aluminium", "aluminum", "steel", "glass"), "Highly recyclable metal and glass components"),
    (("led", "energy", "efficient", "a+"), "Designed for low energy consumption"),
    (("repair", "replaceable", "modular", "removable"), "Designed for repairability"),
    (("mercury-free", "mercury free", "rohs"), "Free from restricted hazardous substances"),
]


def suggest_sustainability_claims(inp: ClaimSuggestionInput) -> ClaimSuggestionOutput:
    if settings.use_openai:
        prompt = (
            "Suggest up to 5 short, verifiable sustainability claims for this product. "
            "Avoid vague greenwashing. Return JSON with key: claims (list of strings).\n\n"
            f"Input:\n{json.dumps(inp.model_dump(by_alias=True))}"
        )
        return _validated(ClaimSuggestionOutput, _openai_json(prompt))

    text = " ".join([inp.product_category, inp.product_name, inp.product_description, inp.materials]).lower()
    claims = []
    for keywords, claim in CLAIM_RULES:
        if any(re.search(rf"(?<![a-z]){re.escape(k)}(?![a-z])", text) for k in keywords):
            claims.append(claim)
    if _is_battery_category(inp.product_category):
        claims.append("Battery designed for safe removal and recycling")
    return ClaimSuggestionOutput(claims=claims[:5])


# ---------- CSRD ----------

def generate_csrd_summary(inp: CsrdSummaryInput) -> CsrdSummaryOutput:
    if settings.use_openai:
        prompt = (
            "Write a concise executive summary (4-6 sentences) for a CSRD sustainability report.\n"
            "Return JSON with key: summaryText (string).\n\n"
            f"Input:\n{json.dumps(inp.model_dump(by_alias=True))}"
        )
        return _validated(CsrdSummaryOutput, _openai_json(prompt))

    initiatives = "\n".join(f"- {i}" for i in inp.key_sustainability_initiatives) or "- No initiatives reported."
    text = (
        f"{inp.company_name} - CSRD Executive Summary ({inp.reporting_period})\n\n"
        f"Total reported greenhouse gas emissions for the period were {inp.total_emissions:,.0f} {inp.emission_unit}. "
        f"The company reports {len(inp.key_sustainability_initiatives)} key sustainability initiatives "
        "supporting its transition plan:\n"
        f"{initiatives}\n\n"
        "Further disclosures on double materiality and value-chain emissions are recommended for the next cycle."
    )
    return CsrdSummaryOutput(summary_text=text)
