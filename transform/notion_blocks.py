import logging
import re
from typing import Any, Dict, List

from transform.content_blocks import ContentBlock

logger = logging.getLogger(__name__)

FENCE = "```"
_HEADING_PREFIX = re.compile(r"^#+\s*")


def to_blocks(markup: str, language: str) -> List[ContentBlock]:
    """
    Convert lightweight markup into an ordered list of content blocks.

    Single pass over the lines with one "inside fence" flag:
    - a line starting with ``` (after trimming) opens or closes a fence;
      the closing fence emits a code block in the document language,
      whatever hint the opening fence carried
    - inside a fence every line is kept verbatim, blank lines included
    - outside, '#' lines become headings (level clamped to 3) and every
      other non-blank line becomes its own paragraph
    - an unterminated fence is flushed at the end of input
    """
    blocks: List[ContentBlock] = []
    code_lines: List[str] = []
    in_code = False

    for line in markup.split("\n"):
        stripped = line.strip()

        if stripped.startswith(FENCE):
            if in_code and code_lines:
                blocks.append(ContentBlock.code(language, "\n".join(code_lines)))
                code_lines = []
            in_code = not in_code
            continue

        if in_code:
            code_lines.append(line)
        elif stripped.startswith("#"):
            level = len(stripped) - len(stripped.lstrip("#"))
            blocks.append(ContentBlock.heading(level, _HEADING_PREFIX.sub("", stripped)))
        elif stripped:
            blocks.append(ContentBlock.paragraph(line))

    if in_code and code_lines:
        logger.debug("Unterminated code fence, flushing remaining lines")
        blocks.append(ContentBlock.code(language, "\n".join(code_lines)))

    return blocks


def to_notion_children(blocks: List[ContentBlock]) -> List[Dict[str, Any]]:
    return [block.to_notion() for block in blocks]


def flatten_text(blocks: List[ContentBlock]) -> str:
    """Plain text of the blocks, one block per line."""
    return "\n".join(block.text for block in blocks)
