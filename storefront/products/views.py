from typing import Optional
import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.checkout.errors import PersistenceFailure
from storefront.products import repository as products_repository
from storefront.products.models import ProductCreate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["Products API"])

MISSING_FIELDS = "Missing required fields"

# module storefront.products.views
@router.get("")
def list_products(category: Optional[str] = None, limit: Optional[int] = Query(default=None, ge=1, le=100)):
    """Liste publique du catalogue (plus récents d'abord), filtre catégorie optionnel."""
    try:
        data = products_repository.list_products(category=category, limit=limit)
    except PersistenceFailure as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=500)
    return JSONResponse({"success": True, "data": data})


@router.post("")
async def create_product(request: Request):
    """
    Crée un produit.
    - Requis: name, description, price (> 0), image_url, category; stock par défaut 0
    - 201 {"success": true, "data": row}; 400 si champ manquant ou mal typé; 500 si le store refuse
    """
    try:
        body = await request.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        return JSONResponse({"success": False, "error": MISSING_FIELDS}, status_code=400)

    try:
        payload = ProductCreate.model_validate(body)
    except ValidationError as e:
        logger.info("products.invalid_payload errors=%s", e.error_count())
        return JSONResponse({"success": False, "error": MISSING_FIELDS}, status_code=400)

    missing = payload.missing_fields()
    if missing:
        logger.info("products.missing_fields fields=%s", ",".join(missing))
        return JSONResponse({"success": False, "error": MISSING_FIELDS}, status_code=400)

    try:
        row = products_repository.create_product(payload.to_row())
    except PersistenceFailure as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=500)
    return JSONResponse({"success": True, "data": row}, status_code=201)
