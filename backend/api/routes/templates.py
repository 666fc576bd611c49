"""
Template API routes.

Lists loaded templates and returns rendered PNGs.
"""
import logging
from io import BytesIO
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from domain.models import FieldOutOfBounds, Template
from services.template_loader import ResourceCache
from services.template_renderer import render_template
from services.text_overrides import apply_to_template
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)


class Replacement(BaseModel):
    find: str
    replace: str


class RenderRequest(BaseModel):
    texts: Optional[List[str]] = None
    replacement: Optional[Replacement] = None


class TemplateListResponse(BaseModel):
    templates: List[str]


def get_resources(request: Request) -> ResourceCache:
    """Dependency returning the cache loaded at startup."""
    return request.app.state.resources


def _get_template(resources: ResourceCache, name: str) -> Template:
    template = resources.get(name)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template not found: {name}")
    return template


def _png_response(template: Template) -> Response:
    try:
        image = render_template(template, strict=settings.STRICT_FIELDS)
    except FieldOutOfBounds as exc:
        logger.warning("[api] render failed for template=%s: %s", template.name, exc)
        raise HTTPException(status_code=422, detail=str(exc))
    buf = BytesIO()
    image.save(buf, format="PNG")
    return Response(content=buf.getvalue(), media_type="image/png")


@router.get("", response_model=TemplateListResponse)
def list_templates(resources: ResourceCache = Depends(get_resources)):
    """Names of every loaded template."""
    return TemplateListResponse(templates=resources.names())


@router.get("/{name}/image")
def template_image(name: str, resources: ResourceCache = Depends(get_resources)):
    """Render a template with its default text."""
    return _png_response(_get_template(resources, name))


@router.post("/{name}/render")
def render_with_overrides(name: str, body: RenderRequest, resources: ResourceCache = Depends(get_resources)):
    """Render a template after applying text overrides."""
    template = _get_template(resources, name)
    replacement = (body.replacement.find, body.replacement.replace) if body.replacement else None
    template = apply_to_template(template, texts=body.texts, replacement=replacement)
    return _png_response(template)
