from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class SourceDocument:
    title: str
    content: str
    file_path: str
    language: str
    tags: Tuple[str, ...] = field(default_factory=tuple)
