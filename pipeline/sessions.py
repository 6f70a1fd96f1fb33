from typing import Optional

from confluence.config import ConfluenceSettings
from confluence.confluence_client import ConfluenceClient
from notion.config import NotionSettings
from notion.notion_client import NotionClient


def connect_notion(settings: NotionSettings, existing: Optional[NotionClient] = None) -> NotionClient:
    """Reuse an existing session, otherwise build one. Raises AuthenticationError without an API key."""
    if existing is not None:
        return existing
    return NotionClient(settings)


def connect_confluence(settings: ConfluenceSettings, existing: Optional[ConfluenceClient] = None) -> ConfluenceClient:
    """Reuse an existing session, otherwise build one. Raises AuthenticationError without credentials."""
    if existing is not None:
        return existing
    return ConfluenceClient(settings)
