import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .logging_config import setup_logging
from .ai_processor import AIFlowError
from .models import (
    ClaimsRequest,
    CsrdSummaryRequest,
    ProductCreateRequest,
    ProductEditRequest,
    SupplyChainLinkRequest,
    SupplyChainLinkUpdateRequest,
)
from .services import sustainability
from .services.product_service import (
    InvalidSupplyChainLinkError,
    LifecycleEndError,
    ProductNotEditableError,
    ProductNotFoundError,
    ProductService,
)
from .services.storage import JsonFileStore, ProductRepository

setup_logging()
logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent
ROOT_DIR = APP_DIR.parent
DATA_DIR = ROOT_DIR / settings.DATA_DIR

app = FastAPI(title="DPP Passport Dashboard API", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_service = None


def get_product_service() -> ProductService:
    global _service
    if _service is None:
        _service = ProductService(ProductRepository(JsonFileStore(DATA_DIR)))
    return _service


# ---------- error mapping ----------

@app.exception_handler(ProductNotFoundError)
async def product_not_found(request: Request, exc: ProductNotFoundError):
    return JSONResponse(status_code=404, content={"detail": f"Product not found: {exc}"})


@app.exception_handler(ProductNotEditableError)
async def product_not_editable(request: Request, exc: ProductNotEditableError):
    return JSONResponse(status_code=409, content={"detail": f"Only user-created products can be edited: {exc}"})


@app.exception_handler(LifecycleEndError)
async def lifecycle_end(request: Request, exc: LifecycleEndError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidSupplyChainLinkError)
async def invalid_link(request: Request, exc: InvalidSupplyChainLinkError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AIFlowError)
async def ai_flow_failed(request: Request, exc: AIFlowError):
    logger.error("AI flow failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ---------- products ----------

@app.get("/api/products/")
def list_products(service: ProductService = Depends(get_product_service)):
    return {"products": service.list_products()}


@app.post("/api/products/", status_code=201)
def create_product(payload: ProductCreateRequest, service: ProductService = Depends(get_product_service)):
    return service.create_product(payload.form, payload.origins)


@app.get("/api/products/{product_id}")
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    product = service.get_product(product_id)
    return {"product": product, "completeness": service.get_completeness(product_id)}


@app.get("/api/products/{product_id}/completeness")
def get_completeness(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.get_completeness(product_id)


@app.get("/api/products/{product_id}/edit-session")
def begin_edit(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.begin_edit(product_id)


@app.put("/api/products/{product_id}")
def submit_edit(product_id: str, payload: ProductEditRequest,
                service: ProductService = Depends(get_product_service)):
    product = service.submit_edit(product_id, payload.form, payload.snapshot)
    return {"product": product, "completeness": service.get_completeness(product_id)}


# ---------- AI assisted actions ----------

@app.post("/api/products/{product_id}/generate-image")
def generate_image(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.generate_image(product_id)


@app.post("/api/products/{product_id}/suggest-claims")
def suggest_claims(product_id: str, service: ProductService = Depends(get_product_service)):
    return {"claims": service.suggest_claims(product_id)}


@app.post("/api/products/{product_id}/claims")
def apply_claims(product_id: str, payload: ClaimsRequest,
                 service: ProductService = Depends(get_product_service)):
    if not any(c.strip() for c in payload.claims):
        raise HTTPException(status_code=400, detail="No claims provided")
    return service.apply_claims(product_id, payload.claims)


@app.post("/api/products/{product_id}/compliance-check")
def compliance_check(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.simulate_compliance_check(product_id)


@app.post("/api/products/{product_id}/sync-eprel")
def sync_eprel(product_id: str, service: ProductService = Depends(get_product_service)):
    product, result = service.sync_eprel(product_id)
    return {"product": product, "sync": result}


# ---------- lifecycle / verification ----------

@app.post("/api/products/{product_id}/advance-stage")
def advance_stage(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.advance_lifecycle_stage(product_id)


@app.post("/api/products/{product_id}/compliance/{regulation:path}/verify")
def verify_document(product_id: str, regulation: str, service: ProductService = Depends(get_product_service)):
    product, success = service.verify_document(product_id, regulation)
    return {"product": product, "verified": success}


# ---------- supply chain ----------

@app.get("/api/suppliers")
def list_suppliers(service: ProductService = Depends(get_product_service)):
    return {"suppliers": service.list_suppliers()}


@app.post("/api/products/{product_id}/supply-chain")
def link_supplier(product_id: str, payload: SupplyChainLinkRequest,
                  service: ProductService = Depends(get_product_service)):
    return service.link_supplier(product_id, payload.supplier_id, payload.supplied_item, payload.notes)


@app.put("/api/products/{product_id}/supply-chain")
def update_supplier_link(product_id: str, payload: SupplyChainLinkUpdateRequest,
                         service: ProductService = Depends(get_product_service)):
    return service.update_supplier_link(product_id, payload.supplier_id, payload.supplied_item,
                                        payload.new_supplied_item, payload.notes)


@app.delete("/api/products/{product_id}/supply-chain")
def unlink_supplier(product_id: str, supplier_id: str, supplied_item: str,
                    service: ProductService = Depends(get_product_service)):
    return service.unlink_supplier(product_id, supplier_id, supplied_item)


# ---------- sustainability ----------

@app.get("/api/sustainability/overview")
def sustainability_overview():
    return sustainability.emissions_overview()


@app.post("/api/sustainability/csrd-summary")
def csrd_summary(payload: Optional[CsrdSummaryRequest] = None):
    payload = payload or CsrdSummaryRequest()
    return sustainability.generate_report(payload.reporting_period)


@app.get("/api/config")
def get_config() -> Dict[str, Any]:
    return {
        "env": settings.ENV,
        "ai_backend": settings.AI_BACKEND,
        "openai_configured": bool(settings.OPENAI_API_KEY),
    }
