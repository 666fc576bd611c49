"""
Template renderer.

Renders every field of a template, in declared order, onto a private copy of
the base image.
"""
import logging
import time

from PIL import Image

from domain.models import FieldOutOfBounds, RenderReport, Template
from services.field_renderer import render_field

logger = logging.getLogger(__name__)


def new_canvas(image: Image.Image) -> Image.Image:
    """Copy the base image into a canvas the renderer may mutate."""
    if image.mode == "RGBA":
        return image.copy()
    return image.convert("RGB")


def render_template_report(template: Template, *, strict: bool = True) -> RenderReport:
    """
    Render a template and describe what happened to each field.

    With `strict` set, the first out-of-bounds field aborts the render.
    Otherwise overhanging fields are clipped and invalid ones are skipped.
    """
    started = time.perf_counter()
    canvas = new_canvas(template.image)
    report = RenderReport(image=canvas)

    for index, field in enumerate(template.fields):
        try:
            result = render_field(canvas, field, template.font, index=index, clip=not strict)
        except FieldOutOfBounds as exc:
            if strict:
                raise
            logger.warning("[template_renderer] template=%s skipping %s", template.name, exc)
            report.skipped.append(exc)
            continue
        report.sizes.append(result.size)
        report.clipped_pixels += result.clipped_pixels

    logger.info(
        "[template_renderer] template=%s fields=%s skipped=%s elapsed_ms=%.1f",
        template.name,
        len(template.fields),
        len(report.skipped),
        (time.perf_counter() - started) * 1000.0,
    )
    return report


def render_template(template: Template, *, strict: bool = True) -> Image.Image:
    """Render a template and return the flattened image."""
    return render_template_report(template, strict=strict).image
