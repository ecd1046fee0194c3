"""Pipeline step functions: convert and scan orchestration over a corpus"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from mdxblocks.config import Settings
from mdxblocks.core.export import write_doc
from mdxblocks.core.extract.extract import ExtractOptions, convert_doc
from mdxblocks.core.models import ConvertedDoc, UnhandledComponent
from mdxblocks.core.parse import discover_files, parse_file
from mdxblocks.core.registry import ComponentRegistry, load_registry
from mdxblocks.core.richtext.converter import get_converter
from mdxblocks.core.validate import UnhandledTally


logger = logging.getLogger(__name__)

T = TypeVar("T")


def extract_options(settings: Settings, mode: str = None) -> ExtractOptions:
    """Build per-run ExtractOptions from settings; mode overrides settings.mode."""
    return ExtractOptions(
        mode=mode or settings.mode,
        allow_placeholder=settings.allow_placeholder,
        converter=get_converter(settings.converter),
    )


def _map_ordered(fn: Callable[[Path], T], paths: Iterable[Path], max_workers: int) -> list[T]:
    """Apply fn to each path, in a thread pool when max_workers > 1; results keep input order."""
    paths = list(paths)
    if max_workers <= 1 or len(paths) <= 1:
        return [fn(p) for p in paths]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(fn, paths))


def convert_file(
    path: Path,
    registry: ComponentRegistry,
    settings: Settings,
    options: ExtractOptions,
    ) -> ConvertedDoc:
    """Parse and segment one file. Errors are re-raised as RuntimeError naming the file."""
    try:
        parsed = parse_file(path, settings.parser_config)
        return convert_doc(parsed, registry, options)
    except Exception as e:
        raise RuntimeError(f"Failed to convert {path}: {e}") from e


def run_convert(
    path: str,
    settings: Settings,
    registry: ComponentRegistry = None,
    ) -> list[tuple[Path, Path, ConvertedDoc]]:
    """Convert every file under path and write one JSON file each to settings.output_dir.

    Returns (source_path, output_file, doc) triples in discovery order.
    """
    registry = registry if registry is not None else load_registry(Path(settings.registry_path))
    options = extract_options(settings)
    output_dir = Path(settings.output_dir)

    def _one(p: Path) -> tuple[Path, Path, ConvertedDoc]:
        doc = convert_file(p, registry, settings, options)
        out_file = write_doc(doc, output_dir, settings.output_format)
        logger.info("Converted %s -> %s (%d blocks)", p, out_file, len(doc.content.blocks))
        return p, out_file, doc

    return _map_ordered(_one, discover_files(Path(path)), settings.max_workers)


def aggregate_unhandled(docs: Iterable[ConvertedDoc]) -> list[UnhandledComponent]:
    """Batch-level unhandled list: counts summed across documents, first location kept."""
    tally = UnhandledTally()
    for doc in docs:
        tally.merge(doc.content.unhandled)
    return tally.as_list()


def run_scan(
    path: str,
    settings: Settings,
    registry: ComponentRegistry = None,
    ) -> list[UnhandledComponent]:
    """Collect-mode pass over path without writing output; returns the aggregated unhandled list."""
    registry = registry if registry is not None else load_registry(Path(settings.registry_path))
    options = extract_options(settings, mode="collect")
    docs = _map_ordered(
        lambda p: convert_file(p, registry, settings, options),
        discover_files(Path(path)),
        settings.max_workers,
    )
    return aggregate_unhandled(docs)
