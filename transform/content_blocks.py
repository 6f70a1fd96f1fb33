from dataclasses import dataclass
from typing import Any, Dict, List
from enum import Enum

# Notion caps a single rich-text object at 2000 characters
RICH_TEXT_LIMIT = 2000

# Source language ids that Notion spells differently
NOTION_LANGUAGES = {
    "cpp": "c++",
    "plaintext": "plain text",
    "": "plain text",
}


class BlockType(Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"


def notion_language(language: str) -> str:
    language = (language or "").lower()
    return NOTION_LANGUAGES.get(language, language)


def rich_text(content: str) -> List[Dict[str, Any]]:
    segments = [
        content[i:i + RICH_TEXT_LIMIT]
        for i in range(0, len(content), RICH_TEXT_LIMIT)
    ] or [""]
    return [{"type": "text", "text": {"content": segment}} for segment in segments]


@dataclass(frozen=True)
class ContentBlock:
    type: BlockType
    text: str
    level: int = 0
    language: str = ""

    @classmethod
    def heading(cls, level: int, text: str) -> "ContentBlock":
        return cls(BlockType.HEADING, text, level=max(1, min(level, 3)))

    @classmethod
    def paragraph(cls, text: str) -> "ContentBlock":
        return cls(BlockType.PARAGRAPH, text)

    @classmethod
    def code(cls, language: str, text: str) -> "ContentBlock":
        return cls(BlockType.CODE, text, language=language)

    @property
    def notion_type(self) -> str:
        if self.type is BlockType.HEADING:
            return f"heading_{self.level}"
        return self.type.value

    def to_notion(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"rich_text": rich_text(self.text)}
        if self.type is BlockType.CODE:
            body["language"] = notion_language(self.language)

        return {
            "object": "block",
            "type": self.notion_type,
            self.notion_type: body,
        }
