from dataclasses import dataclass
from typing import Optional

from shared.config import HTTP_TIMEOUT, resolve_setting

# Persisted settings keys
API_KEY_KEY = "notionSync.apiKey"
DATABASE_ID_KEY = "notionSync.databaseId"
TITLE_PROPERTY_KEY = "notionSync.titleProperty"

NOTION_API_URL = "https://api.notion.com/v1/"
NOTION_VERSION = "2022-06-28"

# Notion accepts at most 100 children per append call
NOTION_APPEND_BATCH = 100


@dataclass
class NotionSettings:
    api_key: Optional[str] = None
    database_id: Optional[str] = None
    title_property: str = "Name"
    api_url: str = NOTION_API_URL
    timeout: float = HTTP_TIMEOUT


def load_notion_settings(store=None) -> NotionSettings:
    """Environment variable first, then the persisted key, per field."""
    return NotionSettings(
        api_key=resolve_setting("NOTION_API_KEY", API_KEY_KEY, store),
        database_id=resolve_setting("NOTION_DATABASE_ID", DATABASE_ID_KEY, store),
        title_property=resolve_setting("NOTION_TITLE_PROPERTY", TITLE_PROPERTY_KEY, store, "Name"),
    )
