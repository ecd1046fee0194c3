"""Write converted documents and unhandled-component reports to disk"""

import json
from pathlib import Path
from typing import Any

from mdxblocks.core.models import ConvertedDoc, UnhandledComponent


FORMATS = ('blocks', 'payload')


def build_output(doc: ConvertedDoc, fmt: str = 'blocks') -> dict[str, Any]:
    """Return the JSON-ready dict for a document in the requested format.

    ``blocks`` is the full native result (blocks, images, unhandled, inline
    references, warnings); ``payload`` is the backend import shape.
    """
    if fmt == 'payload':
        return doc.to_payload()
    if fmt == 'blocks':
        return doc.model_dump(mode='json', by_alias=True)
    raise ValueError(f"Unknown output format {fmt!r}; expected one of {FORMATS}")


def write_doc(doc: ConvertedDoc, output_dir: Path, fmt: str = 'blocks') -> Path:
    """Write one document as <output_dir>/<slug>.json; return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    out_file = output_dir / f"{doc.slug}.json"
    out_file.write_text(json.dumps(build_output(doc, fmt), indent=2, ensure_ascii=False), encoding='utf-8')
    return out_file


def write_unhandled(items: list[UnhandledComponent], path: Path) -> Path:
    """Write the aggregated unhandled-component list as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [u.model_dump(mode='json', by_alias=True) for u in items]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding='utf-8')
    return path
