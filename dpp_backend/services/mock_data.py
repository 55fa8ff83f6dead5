# Built-in demo catalogue: passports and suppliers available without any stored data
from datetime import datetime, timezone
from typing import List
from urllib.parse import quote

from ..models import (
    ComplianceRecord,
    ComplianceStatus,
    LifecycleEvent,
    LifecyclePhase,
    Notification,
    Origin,
    OverallCompliance,
    Product,
    Supplier,
    SupplyChainLink,
    VerificationLogEntry,
)

USER_PRODUCT_PREFIX = "USER_PROD"
PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x400.png"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


MOCK_SUPPLIERS: List[Supplier] = [
    Supplier(id="SUP001", name="GreenSteel Co.", contact_person="Sarah Miller", email="sarah.miller@greensteel.com",
             location="Germany", materials_supplied="Recycled Steel, Low-Carbon Steel", last_updated="2024-07-01"),
    Supplier(id="SUP002", name="BioPolymer Innovations", contact_person="John Chen", email="j.chen@biopolymer.io",
             location="USA", materials_supplied="PLA, PHA, Bio-PET", last_updated="2024-06-15"),
    Supplier(id="SUP003", name="CircuitWorks Ltd.", contact_person="Aisha Khan", email="a.khan@circuitworks.co.uk",
             location="UK", materials_supplied="PCBs, Microcontrollers, Capacitors", last_updated="2024-07-10"),
    Supplier(id="SUP004", name="LithiumSource Inc.", contact_person="Dr. Elena Petrova", email="elena.p@lithiumsource.com",
             location="Chile", materials_supplied="Lithium Carbonate, Lithium Hydroxide", status="Pending Review",
             last_updated="2024-05-20"),
    Supplier(id="SUP005", name="TextileWeavers Global", contact_person="Raj Patel", email="raj@textileweavers.in",
             location="India", materials_supplied="Organic Cotton, Recycled Polyester Yarn", last_updated="2024-07-25"),
]


MOCK_PRODUCTS: List[Product] = [
    Product(
        product_id="PROD001",
        product_name="EcoFriendly Refrigerator X2000",
        gtin="01234567890123",
        gtin_verified=True,
        category="Appliances",
        status="Active",
        compliance="Compliant",
        compliance_last_checked="2024-07-15",
        last_updated="2024-07-20T10:00:00Z",
        manufacturer="GreenTech Appliances",
        manufacturer_verified=True,
        model_number="X2000-ECO",
        description="A state-of-the-art refrigerator designed for maximum energy efficiency and minimal "
                    "environmental impact. Features advanced cooling technology and smart controls.",
        image_url=PLACEHOLDER_IMAGE_URL,
        image_hint="refrigerator appliance",
        materials="Recycled Steel (70%), Bio-based Polymers (20%), Glass (10%)",
        sustainability_claims="Energy Star Certified, Made with 70% recycled content, 95% recyclable at end-of-life.",
        sustainability_claims_verified=True,
        energy_label="A+++",
        specifications={
            "Dimensions (HxWxD)": "180cm x 70cm x 65cm",
            "Capacity": "400 Liters",
            "Energy Consumption": "150 kWh/year",
            "Noise Level": "35 dB",
            "Warranty": "5 years comprehensive, 10 years on compressor",
        },
        supply_chain_links=[
            SupplyChainLink(supplier_id="SUP001", supplied_item="Recycled Steel Panels", notes="70% of total steel content."),
            SupplyChainLink(supplier_id="SUP002", supplied_item="Bio-Polymer for Interior Linings", notes="Made from corn starch."),
        ],
        lifecycle_events=[
            LifecycleEvent(id="EVT001", type="Manufactured", timestamp="2024-01-15T08:00:00Z", location="EcoFactory, Germany",
                           details="Production batch #PB789. End-of-line quality checks passed.",
                           is_blockchain_anchored=True, transaction_hash="0xabc123def456ghi789jkl0mno1pq"),
            LifecycleEvent(id="EVT002", type="Shipped", timestamp="2024-01-20T14:00:00Z", location="Hamburg Port, Germany",
                           details="Container #C0N741N3R to distributor.",
                           is_blockchain_anchored=True, transaction_hash="0xdef456ghi789jkl0mno1pqrust"),
            LifecycleEvent(id="EVT003", type="Sold", timestamp="2024-02-10T16:30:00Z", location="Retail Store, Paris",
                           details="Invoice #INV00567. Warranty activated.", is_blockchain_anchored=False),
        ],
        compliance_data={
            "REACH": ComplianceRecord(status="Compliant", last_checked="2024-07-01T00:00:00Z", report_id="REACH-X2000-001", is_verified=True),
            "RoHS": ComplianceRecord(status="Compliant", last_checked="2024-07-01T00:00:00Z", report_id="ROHS-X2000-001", is_verified=True),
            "WEEE": ComplianceRecord(status="Compliant", last_checked="2024-07-01T00:00:00Z", report_id="WEEE-X2000-001", is_verified=False),
        },
        is_dpp_blockchain_anchored=True,
        dpp_anchor_transaction_hash="0x123mainanchor789xyzabc001",
        current_lifecycle_phase_index=2,
        lifecycle_phases=[
            LifecyclePhase(id="lc001", name="Raw Materials", status="completed", timestamp="2023-12-01T10:00:00Z",
                           location="Verified Suppliers Network", details="Sourcing of certified recycled steel and bio-polymers."),
            LifecyclePhase(id="lc002", name="Manufacturing", status="completed", timestamp="2024-01-15T08:00:00Z",
                           location="EcoFactory, Germany", details="Assembly at EcoFactory. Production batch #PB789 logged."),
            LifecyclePhase(id="lc003", name="Distribution", status="in_progress", timestamp="2024-01-20T14:00:00Z",
                           location="Global Logistics Network", details="Shipping to distribution centers via low-emission freight."),
            LifecyclePhase(id="lc004", name="Retail & Sale", status="pending", timestamp="2024-02-10T16:30:00Z",
                           location="Authorized Retailers", details="EPREL data accessible to consumers via QR code."),
            LifecyclePhase(id="lc005", name="Consumer Use", status="upcoming", location="Consumer Homes",
                           details="Estimated 10-year lifespan."),
            LifecyclePhase(id="lc006", name="End-of-Life", status="upcoming", location="Certified Recycling Partners",
                           details="Designated for 95% recyclability. Take-back program details in DPP."),
        ],
        overall_compliance=OverallCompliance(
            gdpr=ComplianceStatus(status="compliant", last_checked="2024-07-01T10:00:00Z"),
            eprel=ComplianceStatus(status="compliant", entry_id="EPREL12345", last_checked="2024-06-20T10:00:00Z"),
            ebsi_verified=ComplianceStatus(status="compliant", verification_id="EBSI-TX-ABCDEF0123", last_checked="2024-07-15T10:00:00Z"),
            scip=ComplianceStatus(status="not_applicable", last_checked="2024-07-01T10:00:00Z"),
            csrd=ComplianceStatus(status="in_progress", last_checked="2024-07-20T10:00:00Z"),
        ),
        notifications=[
            Notification(id="n001", type="info", message="Quarterly sustainability report due next month.", date="2024-07-10T10:00:00Z"),
            Notification(id="n002", type="warning", message="Supplier 'PolyCore' ethical audit expiring soon. Action recommended.",
                         date="2024-07-18T10:00:00Z"),
        ],
        verification_log=[
            VerificationLogEntry(id="vlog001", event="DPP Created", timestamp="2024-01-10T09:00:00Z", actor="System"),
            VerificationLogEntry(id="vlog002", event="Submitted for Verification", timestamp="2024-01-12T11:30:00Z",
                                 actor="Manufacturer: GreenTech"),
            VerificationLogEntry(id="vlog003", event="Verification Approved", timestamp="2024-01-14T15:00:00Z",
                                 actor="Verifier: CertiSure Inc.", details="All claims verified."),
        ],
    ),
    Product(
        product_id="PROD002",
        product_name="Smart LED Bulb (4-Pack) with Battery Backup",
        gtin="98765432109876",
        gtin_verified=False,
        category="Electronics",
        status="Active",
        compliance="Pending Documentation",
        compliance_last_checked="2024-07-20T00:00:00Z",
        last_updated="2024-07-18T00:00:00Z",
        manufacturer="BrightSpark Electronics",
        manufacturer_verified=True,
        model_number="BS-LED-S04B",
        description="Energy-efficient smart LED bulbs with customizable lighting options, long lifespan, and "
                    "integrated battery backup for power outages.",
        image_url=PLACEHOLDER_IMAGE_URL,
        image_hint="led bulbs package battery",
        materials="Polycarbonate, Aluminum, LEDs, Li-ion Battery Cell",
        sustainability_claims="Uses 85% less energy, Mercury-free, Recyclable packaging, Conflict-free minerals in battery.",
        sustainability_claims_verified=False,
        energy_label="A+",
        specifications={
            "Lumens": "800 lm per bulb",
            "Color Temperature": "2700K - 6500K tunable",
            "Lifespan": "25,000 hours",
            "Connectivity": "Wi-Fi, Bluetooth",
            "Battery Backup Time": "2 hours",
        },
        battery_chemistry="Li-ion NMC",
        state_of_health=99,
        carbon_footprint_manufacturing=5.2,
        recycled_content_percentage=8,
        supply_chain_links=[
            SupplyChainLink(supplier_id="SUP003", supplied_item="LED Chips & PCBs"),
            SupplyChainLink(supplier_id="SUP004", supplied_item="Li-ion Battery Cells",
                            notes="Awaiting full traceability report from supplier."),
        ],
        lifecycle_events=[
            LifecycleEvent(id="EVT004", type="Manufactured", timestamp="2024-03-01T10:00:00Z", location="Shenzhen, China",
                           details="Batch #LEDB456. Battery passport data generated.",
                           is_blockchain_anchored=True, transaction_hash="0xghi789jkl0mno1pqrustvwx"),
            LifecycleEvent(id="EVT005", type="Imported", timestamp="2024-03-15T10:00:00Z", location="Rotterdam Port, Netherlands",
                           details="Shipment #SHP0089. EU customs cleared.", is_blockchain_anchored=False),
        ],
        compliance_data={
            "RoHS": ComplianceRecord(status="Compliant", last_checked="2024-07-01T10:00:00Z", report_id="ROHS-LEDB456-001", is_verified=True),
            "CE Mark": ComplianceRecord(status="Compliant", last_checked="2024-07-01T10:00:00Z", report_id="CE-LEDB456-001", is_verified=True),
            "Battery Regulation (EU 2023/1542)": ComplianceRecord(status="Pending Documentation", last_checked="2024-07-20T10:00:00Z",
                                                                   report_id="BATREG-LEDB456-PRE", is_verified=False),
        },
        current_lifecycle_phase_index=1,
        lifecycle_phases=[
            LifecyclePhase(id="lc007", name="Materials Sourcing", status="completed", timestamp="2024-02-01T10:00:00Z",
                           location="Global Suppliers", details="Sourcing of PC, Al, LED chips, battery components."),
            LifecyclePhase(id="lc008", name="Manufacturing", status="in_progress", timestamp="2024-03-01T10:00:00Z",
                           location="Shenzhen, China", details="Assembly in Shenzhen. Initial battery SoH recorded."),
            LifecyclePhase(id="lc009", name="Distribution", status="pending", timestamp="2024-03-15T10:00:00Z",
                           location="Global Distribution Network", details="Awaiting final packaging data."),
            LifecyclePhase(id="lc010", name="Retail Sale", status="pending", location="Online & Physical Stores",
                           details="EPREL data to be displayed at point of sale."),
            LifecyclePhase(id="lc011", name="Use & Maintenance", status="upcoming", location="Consumer Homes & Businesses",
                           details="Estimated 3-year useful life for battery."),
            LifecyclePhase(id="lc012", name="Battery EOL", status="issue", location="Designated Collection Points",
                           details="Documentation for EU Battery Regulation (EU 2023/1542) is overdue."),
        ],
        overall_compliance=OverallCompliance(
            gdpr=ComplianceStatus(status="not_applicable", last_checked="2024-07-01T10:00:00Z"),
            eprel=ComplianceStatus(status="pending_review", last_checked="2024-07-20T10:00:00Z"),
            ebsi_verified=ComplianceStatus(status="pending_review", verification_id="PENDING_EBSI_CHECK", last_checked="2024-07-20T10:00:00Z"),
            scip=ComplianceStatus(status="compliant", last_checked="2024-07-01T10:00:00Z"),
            csrd=ComplianceStatus(status="not_applicable", last_checked="2024-07-01T10:00:00Z"),
        ),
        notifications=[
            Notification(id="n003", type="error", message="Battery Regulation documentation overdue! Action required.",
                         date="2024-07-19T10:00:00Z"),
            Notification(id="n004", type="warning", message="EPREL registration data needs review by end of week.",
                         date="2024-07-22T10:00:00Z"),
        ],
        verification_log=[
            VerificationLogEntry(id="vlog006", event="DPP Created (AI Extracted)", timestamp="2024-02-25T10:00:00Z", actor="System"),
            VerificationLogEntry(id="vlog007", event="Submitted for Review", timestamp="2024-03-01T11:00:00Z",
                                 actor="Manufacturer: BrightSpark"),
        ],
        origins={
            "product_name": Origin.AI_EXTRACTED,
            "manufacturer": Origin.AI_EXTRACTED,
            "model_number": Origin.AI_EXTRACTED,
            "description": Origin.AI_EXTRACTED,
            "image_url": Origin.AI_EXTRACTED,
            "materials": Origin.AI_EXTRACTED,
            "sustainability_claims": Origin.AI_EXTRACTED,
            "energy_label": Origin.AI_EXTRACTED,
            "specifications": Origin.AI_EXTRACTED,
            "battery_chemistry": Origin.AI_EXTRACTED,
            "state_of_health": Origin.MANUAL,
            "carbon_footprint_manufacturing": Origin.AI_EXTRACTED,
            "recycled_content_percentage": Origin.MANUAL,
        },
    ),
]


def default_product_values(product_id: str) -> Product:
    """Defaults for a user-added passport; stored values are laid over these."""
    created = now_iso()
    short_id = product_id.replace(USER_PRODUCT_PREFIX, "P")
    return Product(
        product_id=product_id,
        product_name="User Added Product",
        gtin="",
        category="General",
        status="Draft",
        compliance="N/A",
        last_updated=created,
        manufacturer="N/A",
        model_number="N/A",
        description="No description provided.",
        image_url=f"{PLACEHOLDER_IMAGE_URL}?text={quote(short_id)}",
        image_hint="product placeholder",
        materials="Not specified",
        sustainability_claims="None specified",
        energy_label="N/A",
        specifications={},
        current_lifecycle_phase_index=0,
        lifecycle_phases=[
            LifecyclePhase(id=f"lc_user_{product_id}_1", name="Created", status="completed", timestamp=created,
                           location="System", details="Product entry created by user."),
            LifecyclePhase(id=f"lc_user_{product_id}_2", name="Pending Review", status="in_progress",
                           details="Awaiting further data input and review."),
        ],
        overall_compliance=OverallCompliance(
            gdpr=ComplianceStatus(last_checked=created),
            eprel=ComplianceStatus(last_checked=created),
            ebsi_verified=ComplianceStatus(last_checked=created),
            scip=ComplianceStatus(last_checked=created),
            csrd=ComplianceStatus(last_checked=created),
        ),
        notifications=[
            Notification(id=f"user_info_{product_id}", type="info",
                         message="This product was added by a user and may have incomplete data. Please review and update.",
                         date=created),
        ],
        verification_log=[
            VerificationLogEntry(id=f"vlog_user_{product_id}", event="DPP Created by User", timestamp=created, actor="User"),
        ],
    )
