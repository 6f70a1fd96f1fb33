import logging
import os
import re
from typing import List, Optional, Tuple

from extraction.languages import detect_language
from extraction.models import SourceDocument

logger = logging.getLogger(__name__)

BRACE_LANGUAGES = ("javascript", "typescript", "java", "c", "cpp")
SCRIPT_LANGUAGE = "python"

_JSDOC_PATTERN = re.compile(r"/\*\*[\s\S]*?\*/")
_JSDOC_DELIMITERS = re.compile(r"/\*\*|\*/")
_JSDOC_CONTINUATION = re.compile(r"^\s*\*\s?", re.MULTILINE)

_DOCSTRING_PATTERN = re.compile(r'("""[\s\S]*?"""|\'\'\'[\s\S]*?\'\'\')')
_DOCSTRING_DELIMITERS = re.compile(r'"""|\'\'\'')


def _full_code_section(content: str, fence_language: str = "") -> str:
    return f"\n\n---\n## Full Code\n```{fence_language}\n{content}\n```"


def _extract_jsdoc(content: str) -> str:
    matches = _JSDOC_PATTERN.findall(content)
    if not matches:
        return content

    spans = []
    for match in matches:
        cleaned = _JSDOC_DELIMITERS.sub("", match)
        cleaned = _JSDOC_CONTINUATION.sub("", cleaned)
        spans.append(cleaned.strip())

    return "\n\n".join(spans) + _full_code_section(content)


def _extract_docstrings(content: str) -> str:
    matches = _DOCSTRING_PATTERN.findall(content)
    if not matches:
        return content

    spans = [_DOCSTRING_DELIMITERS.sub("", match).strip() for match in matches]
    return "\n\n".join(spans) + _full_code_section(content, SCRIPT_LANGUAGE)


def extract_documentation(content: str, language: str) -> str:
    """
    Pull documentation spans out of a source file.
    Returns the raw content unchanged when the language is not handled
    or nothing matched.
    """
    if language in BRACE_LANGUAGES:
        return _extract_jsdoc(content)
    if language == SCRIPT_LANGUAGE:
        return _extract_docstrings(content)
    return content


def extract_tags(content: str, language: str) -> List[str]:
    """
    Coarse tags by substring presence. Not a parser: matches inside
    strings and comments count too.
    """
    tags = [language]

    def add(tag: str):
        if tag not in tags:
            tags.append(tag)

    if "class " in content:
        add("class")
    if "function " in content or "def " in content:
        add("function")
    if "interface " in content:
        add("interface")
    if "TODO" in content or "FIXME" in content:
        add("needs-review")

    return tags


def summarize(content: str, language: str, file_name: str) -> str:
    return f"## {file_name}\n\nLanguage: {language}\n\n```{language}\n{content}\n```"


def extract(content: str, language: str, file_name: str = "Untitled") -> Tuple[str, List[str]]:
    """
    Produce the lightweight markup and tag list for one source file.

    When extraction yields nothing new (no doc comments, or an unhandled
    language) the markup is a summary of the file: a heading with the
    file name, the language, and the whole file in a fenced block.
    """
    documentation = extract_documentation(content, language)

    if documentation and documentation != content:
        markup = documentation
    else:
        logger.debug(f"No documentation found in {file_name} ({language}), using file summary")
        markup = summarize(content, language, file_name)

    return markup, extract_tags(content, language)


def parse_document(content: str, file_path: str, language: Optional[str] = None) -> SourceDocument:
    title = os.path.basename(file_path)
    language = language or detect_language(file_path)
    markup, tags = extract(content, language, title)

    return SourceDocument(
        title=title,
        content=markup,
        file_path=file_path,
        language=language,
        tags=tuple(tags),
    )
