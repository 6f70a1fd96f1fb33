import re
from typing import List

_H3 = re.compile(r"^### (.*?)$", re.MULTILINE)
_H2 = re.compile(r"^## (.*?)$", re.MULTILINE)
_H1 = re.compile(r"^# (.*?)$", re.MULTILINE)
_FENCED_CODE = re.compile(r"```(\w+)?\n([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_BULLET_ITEM = re.compile(r"^- (.+?)$", re.MULTILINE)
_LIST_ITEM_RUN = re.compile(r"(<li>.*</li>\n?)+")
_NUMBERED_ITEM = re.compile(r"^\d+\. (.+?)$", re.MULTILINE)
_STARTS_WITH_TAG = re.compile(r"^<[a-z]")

# Stands in for a finished code macro while the inline passes run.
# Starts like a tag so the paragraph pass leaves it alone.
_PLACEHOLDER_TAG = "docsync-code"


def cdata(text: str) -> str:
    """Wrap text in CDATA, splitting any ']]>' so the section stays intact."""
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def code_macro(language: str, body: str) -> str:
    return (
        '<ac:structured-macro ac:name="code">'
        f'<ac:parameter ac:name="language">{language}</ac:parameter>'
        f"<ac:plain-text-body>{cdata(body)}</ac:plain-text-body>"
        "</ac:structured-macro>"
    )


def _wrap_paragraphs(content: str) -> str:
    paragraphs = []
    for para in content.split("\n\n"):
        if _STARTS_WITH_TAG.match(para):
            paragraphs.append(para)
        else:
            paragraphs.append(f"<p>{para}</p>")
    return "\n".join(paragraphs)


def _placeholder_tag(markup: str) -> str:
    """A placeholder tag name that does not already occur in the markup."""
    tag = _PLACEHOLDER_TAG
    while f"<{tag}-" in markup:
        tag += "-x"
    return tag


def to_storage(markup: str) -> str:
    """
    Convert lightweight markup into Confluence storage format.

    The passes run in a fixed order:
      1. headings (### before ## before #)
      2. fenced code -> code macro, body kept verbatim in CDATA
      3. inline code
      4. bold
      5. italic (after bold so **x** is not read as two italics)
      6. bullet items, consecutive items wrapped in <ul>
      7. numbered items (left as loose <li>, no <ol>)
      8. paragraphs: blank-line separated segments not starting with a tag
    Code macros are parked behind placeholders during passes 3-8.
    """
    content = _H3.sub(r"<h3>\1</h3>", markup)
    content = _H2.sub(r"<h2>\1</h2>", content)
    content = _H1.sub(r"<h1>\1</h1>", content)

    tag = _placeholder_tag(markup)
    macros: List[str] = []

    def park(match: re.Match) -> str:
        macros.append(code_macro(match.group(1) or "none", match.group(2).strip()))
        return f"<{tag}-{len(macros) - 1}/>"

    def restore(match: re.Match) -> str:
        index = int(match.group(1))
        return macros[index] if index < len(macros) else match.group(0)

    content = _FENCED_CODE.sub(park, content)

    content = _INLINE_CODE.sub(r"<code>\1</code>", content)
    content = _BOLD.sub(r"<strong>\1</strong>", content)
    content = _ITALIC.sub(r"<em>\1</em>", content)

    content = _BULLET_ITEM.sub(r"<li>\1</li>", content)
    content = _LIST_ITEM_RUN.sub(lambda m: f"<ul>{m.group(0)}</ul>", content)

    # numbered items stay loose, there is no <ol> pass
    content = _NUMBERED_ITEM.sub(r"<li>\1</li>", content)

    content = _wrap_paragraphs(content)

    return re.sub(rf"<{re.escape(tag)}-(\d+)/>", restore, content)
