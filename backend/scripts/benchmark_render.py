"""Time template loading and rendering.

Usage:
    python -m scripts.benchmark_render --template weatherboy [--iterations 20]
"""

from __future__ import annotations

import argparse
import logging
import statistics
import time
from typing import Callable, List, Optional

from services.template_loader import ResourceCache, check_all_resources, list_template_names, load_template
from services.template_renderer import render_template
from settings import settings

logger = logging.getLogger("benchmark_render")


def _time(label: str, fn: Callable[[], object], iterations: int) -> float:
    samples = []
    for _ in range(iterations):
        started = time.perf_counter()
        fn()
        samples.append((time.perf_counter() - started) * 1000.0)
    median = statistics.median(samples)
    print(f"{label:<50} median={median:8.2f} ms  min={min(samples):8.2f} ms  n={iterations}")
    return median


def main(argv: Optional[List[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")
    parser = argparse.ArgumentParser(description="Benchmark template loading and rendering.")
    parser.add_argument("--templates-dir", default=str(settings.TEMPLATES_DIR))
    parser.add_argument("--resource-root", default=str(settings.RESOURCE_ROOT))
    parser.add_argument("--template", required=True)
    parser.add_argument("--iterations", type=int, default=20)
    args = parser.parse_args(argv)

    template = load_template(args.templates_dir, args.template, args.resource_root)
    if template is None:
        print(f"Template not found: {args.template}")
        return 1

    n = args.iterations
    _time("get names from template files", lambda: list_template_names(args.templates_dir), n)
    _time("load one template and resources from disk", lambda: load_template(args.templates_dir, args.template, args.resource_root), n)
    _time("validate all templates and resources", lambda: check_all_resources(args.templates_dir, args.resource_root), n)
    _time("load all templates into memory", lambda: ResourceCache.load(args.templates_dir, args.resource_root), max(1, n // 10))
    _time("render a loaded template", lambda: render_template(template), n)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
