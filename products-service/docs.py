"""Static documentation pages for the problem `type` URIs."""
import os

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from config import PRODUCT_NOT_FOUND_TYPE, VALIDATION_ERROR_TYPE

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)

router = APIRouter(prefix="/errors", include_in_schema=False)


def _context() -> dict:
    return {
        "product_not_found_type": PRODUCT_NOT_FOUND_TYPE,
        "validation_error_type": VALIDATION_ERROR_TYPE,
    }


@router.get("", response_class=HTMLResponse)
async def error_types_index(request: Request):
    return templates.TemplateResponse(request, "errors_index.html", _context())


@router.get("/product-not-found", response_class=HTMLResponse)
async def product_not_found_doc(request: Request):
    return templates.TemplateResponse(request, "product_not_found.html", _context())


@router.get("/validation-error", response_class=HTMLResponse)
async def validation_error_doc(request: Request):
    return templates.TemplateResponse(request, "validation_error.html", _context())
