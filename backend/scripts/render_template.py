"""Render one template to a PNG file, or list / validate the template directory.

Usage:
    python -m scripts.render_template --template weatherboy [--text TOP --text BOTTOM] [--replace OLD NEW] [--out meme.png]
    python -m scripts.render_template --list
    python -m scripts.render_template --check

Run from the backend/ directory (or via the installed `caption-render` command).
Defaults come from CAPTION_TEMPLATES_DIR / CAPTION_RESOURCE_ROOT.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from domain.models import FieldOutOfBounds
from services.template_loader import (
    TemplateResourceError,
    check_all_resources,
    list_template_names,
    load_template,
)
from services.template_renderer import render_template_report
from services.text_overrides import apply_to_template
from settings import settings

logger = logging.getLogger("render_template")

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render text onto a template image.")
    parser.add_argument("--templates-dir", default=str(settings.TEMPLATES_DIR), help="Directory of template JSON files.")
    parser.add_argument("--resource-root", default=str(settings.RESOURCE_ROOT), help="Root that image/font paths are relative to.")
    parser.add_argument("--template", help="Name of the template to render.")
    parser.add_argument("--text", action="append", default=[], help="Replacement text for the next field (repeatable).")
    parser.add_argument("--replace", nargs=2, metavar=("FIND", "REPLACE"), help="Literal substitution applied to every field.")
    parser.add_argument("--out", default=None, help="Output PNG path (defaults to <template>.png).")
    parser.add_argument("--list", action="store_true", help="List template names and exit.")
    parser.add_argument("--check", action="store_true", help="Validate every template and its files, then exit.")
    parser.add_argument("--lenient", action="store_true", help="Clip or skip bad fields instead of failing.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL, format="%(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.list:
            for name in list_template_names(args.templates_dir):
                print(name)
            return EXIT_OK
        if args.check:
            count = check_all_resources(args.templates_dir, args.resource_root)
            print(f"{count} templates OK")
            return EXIT_OK
        if not args.template:
            parser.error("--template is required unless --list or --check is given")

        template = load_template(args.templates_dir, args.template, args.resource_root)
        if template is None:
            logger.error("Template not found: %s", args.template)
            return EXIT_NOT_FOUND

        template = apply_to_template(
            template,
            texts=args.text,
            replacement=tuple(args.replace) if args.replace else None,
        )
        report = render_template_report(template, strict=not args.lenient)
    except (TemplateResourceError, FieldOutOfBounds) as exc:
        logger.error("%s", exc)
        return EXIT_ERROR

    out_path = Path(args.out or f"{args.template}.png")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    report.image.save(out_path, format="PNG")
    for skipped in report.skipped:
        logger.warning("skipped %s", skipped)
    print(f"Wrote {out_path}")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
