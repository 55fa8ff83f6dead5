from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DppModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())


class Origin(str, Enum):
    AI_EXTRACTED = "AI_EXTRACTED"
    MANUAL = "manual"


class LifecycleEvent(DppModel):
    id: str
    type: str
    timestamp: str
    location: str = ""
    details: str = ""
    is_blockchain_anchored: Optional[bool] = None
    transaction_hash: Optional[str] = None


class ComplianceRecord(DppModel):
    status: str
    last_checked: str
    report_id: str = ""
    is_verified: Optional[bool] = None


class ComplianceStatus(DppModel):
    status: str = "pending_review"  # compliant | non_compliant | pending_review | not_applicable | in_progress
    last_checked: Optional[str] = None
    entry_id: Optional[str] = None
    verification_id: Optional[str] = None


class OverallCompliance(DppModel):
    gdpr: ComplianceStatus = Field(default_factory=ComplianceStatus)
    eprel: ComplianceStatus = Field(default_factory=ComplianceStatus)
    ebsi_verified: ComplianceStatus = Field(default_factory=ComplianceStatus)
    scip: ComplianceStatus = Field(default_factory=ComplianceStatus)
    csrd: ComplianceStatus = Field(default_factory=ComplianceStatus)


class LifecyclePhase(DppModel):
    id: str
    name: str
    status: str  # completed | in_progress | pending | upcoming | issue
    timestamp: Optional[str] = None
    location: Optional[str] = None
    details: Optional[str] = None


class Notification(DppModel):
    id: str
    type: str  # info | warning | error
    message: str
    date: str


class VerificationLogEntry(DppModel):
    id: str
    event: str
    timestamp: str
    actor: Optional[str] = None
    details: Optional[str] = None


class SupplyChainLink(DppModel):
    supplier_id: str
    supplied_item: str
    notes: Optional[str] = None


class Supplier(DppModel):
    id: str
    name: str
    contact_person: str = ""
    email: str = ""
    location: str = ""
    materials_supplied: str = ""
    status: str = "Active"
    last_updated: str = ""


class Product(DppModel):
    """A Digital Product Passport as shown on the product detail page."""
    product_id: str
    product_name: str = ""
    gtin: str = ""
    gtin_verified: Optional[bool] = None
    category: str = ""
    status: str = "Draft"
    compliance: str = "N/A"
    compliance_last_checked: Optional[str] = None
    last_updated: str = ""
    manufacturer: str = ""
    manufacturer_verified: Optional[bool] = None
    model_number: str = ""
    description: str = ""
    image_url: Optional[str] = None
    image_hint: Optional[str] = None
    materials: str = ""
    sustainability_claims: str = ""
    sustainability_claims_verified: Optional[bool] = None
    energy_label: str = ""
    specifications: Union[Dict[str, str], str] = Field(default_factory=dict)
    lifecycle_events: List[LifecycleEvent] = Field(default_factory=list)
    compliance_data: Dict[str, ComplianceRecord] = Field(default_factory=dict)
    is_dpp_blockchain_anchored: bool = False
    dpp_anchor_transaction_hash: Optional[str] = None
    battery_chemistry: Optional[str] = None
    state_of_health: Optional[float] = None
    carbon_footprint_manufacturing: Optional[float] = None
    recycled_content_percentage: Optional[float] = None
    supply_chain_links: List[SupplyChainLink] = Field(default_factory=list)
    current_lifecycle_phase_index: int = 0
    lifecycle_phases: List[LifecyclePhase] = Field(default_factory=list)
    overall_compliance: OverallCompliance = Field(default_factory=OverallCompliance)
    notifications: List[Notification] = Field(default_factory=list)
    verification_log: List[VerificationLogEntry] = Field(default_factory=list)
    # field name -> provenance; a missing key means the origin was never set
    origins: Dict[str, Origin] = Field(default_factory=dict)


class ProductFormData(DppModel):
    """Values submitted by the product form. None means the field was not sent."""
    product_name: Optional[str] = None
    gtin: Optional[str] = None
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    model_number: Optional[str] = None
    materials: Optional[str] = None
    sustainability_claims: Optional[str] = None
    specifications: Optional[str] = None
    energy_label: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    battery_chemistry: Optional[str] = None
    state_of_health: Optional[float] = None
    carbon_footprint_manufacturing: Optional[float] = None
    recycled_content_percentage: Optional[float] = None


class StoredProduct(ProductFormData):
    """A user-created product as persisted in the key-value store."""
    id: str
    specifications: Union[str, Dict[str, str], None] = None
    status: str = "Draft"
    compliance: str = "N/A"
    last_updated: str = ""
    origins: Dict[str, Origin] = Field(default_factory=dict)
    is_dpp_blockchain_anchored: bool = False
    dpp_anchor_transaction_hash: Optional[str] = None
    supply_chain_links: List[SupplyChainLink] = Field(default_factory=list)
    lifecycle_events: Optional[List[LifecycleEvent]] = None
    compliance_data: Optional[Dict[str, ComplianceRecord]] = None
    lifecycle_phases: Optional[List[LifecyclePhase]] = None
    current_lifecycle_phase_index: Optional[int] = None
    overall_compliance: Optional[OverallCompliance] = None


class EditSnapshot(DppModel):
    """Form values and origins captured when an edit session begins."""
    values: ProductFormData
    origins: Dict[str, Origin] = Field(default_factory=dict)


class SectionCompleteness(DppModel):
    section_name: str
    score: int
    filled_fields: int
    total_fields: int
    missing_fields_in_section: List[str] = Field(default_factory=list)


class CompletenessResult(DppModel):
    overall_score: int
    overall_filled_fields: int
    overall_total_fields: int
    sections: List[SectionCompleteness] = Field(default_factory=list)


# ---------- AI flow contracts ----------

class ComplianceCheckInput(DppModel):
    product_id: str
    current_lifecycle_stage_name: str
    new_lifecycle_stage_name: str
    product_category: str


class ComplianceCheckOutput(DppModel):
    new_lifecycle_stage_name: str
    simulated_overall_status: str
    simulated_report: str


class EprelSyncStatus(str, Enum):
    SYNCED = "Synced Successfully"
    NOT_FOUND = "Product Not Found in EPREL"
    DATA_MISMATCH = "Data Mismatch"
    ERROR = "Error During Sync"


class EprelSyncInput(DppModel):
    product_id: str
    product_name: str
    model_number: str


class EprelSyncOutput(DppModel):
    sync_status: EprelSyncStatus
    eprel_id: Optional[str] = None
    last_checked: str
    message: str = ""


class ImageGenerationInput(DppModel):
    product_name: str
    product_category: str = ""


class ImageGenerationOutput(DppModel):
    image_url: str


class ClaimSuggestionInput(DppModel):
    product_category: str = "Unknown"
    product_name: str = ""
    product_description: str = ""
    materials: str = ""


class ClaimSuggestionOutput(DppModel):
    claims: List[str] = Field(default_factory=list)


class CsrdSummaryInput(DppModel):
    company_name: str
    reporting_period: str
    total_emissions: float
    emission_unit: str = "tCO2e"
    key_sustainability_initiatives: List[str] = Field(default_factory=list)


class CsrdSummaryOutput(DppModel):
    summary_text: str


# ---------- API request bodies ----------

class ProductCreateRequest(DppModel):
    form: ProductFormData
    origins: Dict[str, Origin] = Field(default_factory=dict)


class ProductEditRequest(DppModel):
    form: ProductFormData
    snapshot: Optional[EditSnapshot] = None


class ClaimsRequest(DppModel):
    claims: List[str]


class SupplyChainLinkRequest(DppModel):
    supplier_id: str
    supplied_item: str
    notes: Optional[str] = None


class SupplyChainLinkUpdateRequest(SupplyChainLinkRequest):
    new_supplied_item: str


class CsrdSummaryRequest(DppModel):
    reporting_period: str = "Annual 2024"
