import logging
from pathlib import Path
from typing import Iterator, List

from extraction.languages import SOURCE_EXTENSIONS, detect_language
from extraction.models import SourceDocument
from extraction.source_extractor import parse_document

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = ("node_modules",)


def iter_source_files(root: str) -> Iterator[Path]:
    """
    Yields source files under root in sorted order, skipping anything
    inside an excluded directory.
    """
    base = Path(root)
    for path in sorted(base.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in SOURCE_EXTENSIONS:
            continue
        if any(part in EXCLUDED_DIRS for part in path.relative_to(base).parts):
            continue
        yield path


def parse_file(path: Path) -> SourceDocument:
    content = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_document(content, str(path), detect_language(str(path)))


def parse_workspace(root: str) -> List[SourceDocument]:
    documents = []
    for path in iter_source_files(root):
        documents.append(parse_file(path))
    logger.info(f"Parsed {len(documents)} source files under {root}")
    return documents
