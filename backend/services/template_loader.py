"""
Template loader and resource cache.

Templates are JSON files named `<template_name>.json` inside a templates
directory. Image and font paths inside them are relative to a resource root.
"""
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Dict, List, Mapping, Optional, Tuple, Union

from PIL import Image
from pydantic import BaseModel, Field

from domain.models import Border, Point, Shadow, Template, TextField
from services.fonts import FontResource

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Channel = Annotated[int, Field(ge=0, le=255)]
RGB = Tuple[Channel, Channel, Channel]


class TemplateResourceError(RuntimeError):
    """A template file, or a file it references, cannot be read or decoded."""


class TextFieldSpec(BaseModel):
    text: str
    uppercase: bool = False
    start: Tuple[int, int]
    end: Tuple[int, int]
    text_size: float = Field(gt=0)
    text_color: RGB
    border_color: Optional[RGB] = None
    shadow_color: Optional[RGB] = None

    def to_field(self) -> TextField:
        effects = []
        if self.shadow_color is not None:
            effects.append(Shadow(color=tuple(self.shadow_color)))
        if self.border_color is not None:
            effects.append(Border(color=tuple(self.border_color)))
        return TextField(
            text=self.text,
            start=Point(*self.start),
            end=Point(*self.end),
            text_size=self.text_size,
            text_color=tuple(self.text_color),
            uppercase=self.uppercase,
            effects=tuple(effects),
        )


class TemplateSpec(BaseModel):
    template_name: str
    image_path: str
    font_path: str
    text_fields: List[TextFieldSpec] = []


def list_template_names(templates_dir: PathLike) -> List[str]:
    """Names of all templates in the directory, sorted."""
    templates_dir = Path(templates_dir)
    if not templates_dir.is_dir():
        raise TemplateResourceError(f"templates directory not found: {templates_dir}")
    return sorted(path.stem for path in templates_dir.glob("*.json") if path.is_file())


def read_template_spec(templates_dir: PathLike, name: str) -> Optional[TemplateSpec]:
    """
    Read and validate one template file.

    Returns:
        The parsed spec, or None if no file exists for `name`

    Raises:
        TemplateResourceError: If the file cannot be read or is invalid
    """
    path = Path(templates_dir) / f"{name}.json"
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return TemplateSpec.model_validate(data)
    except (OSError, ValueError) as exc:
        # ValidationError and JSONDecodeError are both ValueErrors.
        raise TemplateResourceError(f"failed to read template {path}: {exc}") from exc


def _open_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            has_alpha = img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info)
            return img.convert("RGBA" if has_alpha else "RGB")
    except OSError as exc:
        raise TemplateResourceError(f"failed to decode image {path}: {exc}") from exc


def _open_font(path: Path) -> FontResource:
    try:
        return FontResource.from_path(path)
    except OSError as exc:
        raise TemplateResourceError(f"failed to load font {path}: {exc}") from exc


def build_template(
    spec: TemplateSpec,
    resource_root: PathLike = ".",
    images: Optional[Dict[Path, Image.Image]] = None,
    fonts: Optional[Dict[Path, FontResource]] = None,
) -> Template:
    """
    Decode the resources a spec references and build the Template.

    `images` and `fonts` let callers share decoded resources between
    templates that reference the same files.
    """
    resource_root = Path(resource_root)
    images = {} if images is None else images
    fonts = {} if fonts is None else fonts

    image_path = resource_root / spec.image_path
    if image_path not in images:
        images[image_path] = _open_image(image_path)
    font_path = resource_root / spec.font_path
    if font_path not in fonts:
        fonts[font_path] = _open_font(font_path)

    return Template(
        name=spec.template_name,
        image=images[image_path],
        font=fonts[font_path],
        fields=tuple(field.to_field() for field in spec.text_fields),
    )


def load_template(templates_dir: PathLike, name: str, resource_root: PathLike = ".") -> Optional[Template]:
    """Load a template and its resources from disk; None if it doesn't exist."""
    spec = read_template_spec(templates_dir, name)
    if spec is None:
        return None
    return build_template(spec, resource_root)


def check_all_resources(templates_dir: PathLike, resource_root: PathLike = ".") -> int:
    """
    Validate every template file and confirm the files it references exist.

    Returns:
        Number of templates checked
    """
    resource_root = Path(resource_root)
    names = list_template_names(templates_dir)
    for name in names:
        spec = read_template_spec(templates_dir, name)
        for rel_path in (spec.image_path, spec.font_path):
            if not (resource_root / rel_path).is_file():
                raise TemplateResourceError(f"template {name!r} references missing file {rel_path}")
    return len(names)


class ResourceCache:
    """
    Every template loaded once, shared read-only by all renders.

    Templates that reference the same image or font share one decoded copy.
    """

    def __init__(self, templates: Mapping[str, Template]):
        self._templates = MappingProxyType(dict(templates))

    @classmethod
    def load(cls, templates_dir: PathLike, resource_root: PathLike = ".") -> "ResourceCache":
        images: Dict[Path, Image.Image] = {}
        fonts: Dict[Path, FontResource] = {}
        templates: Dict[str, Template] = {}
        for name in list_template_names(templates_dir):
            spec = read_template_spec(templates_dir, name)
            templates[name] = build_template(spec, resource_root, images=images, fonts=fonts)
        logger.info(
            "[template_loader] loaded templates=%s images=%s fonts=%s from %s",
            len(templates),
            len(images),
            len(fonts),
            templates_dir,
        )
        return cls(templates)

    def get(self, name: str) -> Optional[Template]:
        return self._templates.get(name)

    def names(self) -> List[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)
