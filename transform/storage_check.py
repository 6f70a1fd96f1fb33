from typing import List

from lxml import etree

# Storage format uses these prefixes without declaring them
_WRAPPER = (
    '<docsync-root xmlns:ac="http://atlassian.com/content" '
    'xmlns:ri="http://atlassian.com/resource/identifier">{}</docsync-root>'
)


def parse_storage(markup: str) -> etree._Element:
    """Parse a storage-format body. Raises etree.XMLSyntaxError when malformed."""
    parser = etree.XMLParser(recover=False, resolve_entities=False)
    return etree.fromstring(_WRAPPER.format(markup).encode("utf-8"), parser)


def storage_problems(markup: str) -> List[str]:
    """
    Report why a storage body would be rejected as XHTML.
    An empty list means the body is well formed.
    """
    try:
        parse_storage(markup)
    except etree.XMLSyntaxError as e:
        problems = [str(entry.message).strip() for entry in e.error_log]
        return problems or [str(e)]
    return []


def storage_text(markup: str) -> str:
    """All character data in the body, tags and macro parameters dropped."""
    root = parse_storage(markup)
    for param in root.iter("{http://atlassian.com/content}parameter"):
        param.text = None
    return "".join(root.itertext())
