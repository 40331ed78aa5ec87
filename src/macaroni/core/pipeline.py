"""Batch orchestration: discover, parse, and export markdown files"""

import logging
from pathlib import Path

from macaroni.core.export import write_document
from macaroni.core.parse import discover_files, parse_file


logger = logging.getLogger(__name__)


def run_export(
    path: str,
    output_dir: Path,
    indent: int = 2,
    blocks_only: bool = False,
    ) -> list[tuple[Path, Path]]:
    """Parse every markdown file under path and write its JSON. Returns (source, json_path) pairs."""
    results = []
    for p in discover_files(Path(path)):
        try:
            doc = parse_file(p)
            out_file = write_document(doc, p, output_dir, indent, blocks_only)
        except Exception as e:
            raise RuntimeError(f"Failed to parse {p}: {e}") from e
        logger.info("%s -> %s (%d blocks)", p, out_file, len(doc.block_elements))
        results.append((p, out_file))
    return results
