import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
DATA = ROOT / "data"
DOCS = DATA / "regulatory_docs"

for d in (DATA, DOCS):
    d.mkdir(parents=True, exist_ok=True)

# a few regulatory snippets used in compliance check reports
(DOCS / "ESPR_Article_1.txt").write_text("Products must contain clear material composition and recycled content.", encoding="utf-8")
(DOCS / "Battery_Regulation_2023_1542.txt").write_text("Batteries require a battery passport with chemistry, state of health and carbon footprint.", encoding="utf-8")
(DOCS / "WEEE_Directive.txt").write_text("Electrical equipment must provide end-of-life collection and recycling information.", encoding="utf-8")

# one example user product and supplier, in the layout the API stores them
products_file = DATA / "user_products.json"
if not products_file.exists():
    products_file.write_text(json.dumps([{
        "id": "USER_PROD0001",
        "productName": "Recycled Cotton Hoodie",
        "category": "Textiles",
        "manufacturer": "GreenThreads",
        "modelNumber": "GT-HD-01",
        "materials": "Recycled Cotton 60%, Organic Cotton 40%",
        "specifications": json.dumps({"Weight": "480 gsm", "Sizes": "XS-XXL"}),
        "status": "Draft",
        "origins": {"product_name": "AI_EXTRACTED", "materials": "AI_EXTRACTED"},
    }], indent=2), encoding="utf-8")

suppliers_file = DATA / "user_suppliers.json"
if not suppliers_file.exists():
    suppliers_file.write_text(json.dumps([{
        "id": "SUP100",
        "name": "Porto Spinning Mills",
        "location": "Portugal",
        "materialsSupplied": "Recycled Cotton Yarn",
        "status": "Active",
    }], indent=2), encoding="utf-8")

print("Environment ready. Data directory seeded.")
