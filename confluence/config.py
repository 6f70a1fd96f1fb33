from dataclasses import dataclass
from typing import Optional

from shared.config import HTTP_TIMEOUT, resolve_setting

# Persisted settings keys
BASE_URL_KEY = "confluenceSync.baseUrl"
USERNAME_KEY = "confluenceSync.username"
API_TOKEN_KEY = "confluenceSync.apiToken"
SPACE_KEY_KEY = "confluenceSync.spaceKey"
PARENT_PAGE_ID_KEY = "confluenceSync.parentPageId"

CONFLUENCE_KEYS = (
    BASE_URL_KEY,
    USERNAME_KEY,
    API_TOKEN_KEY,
    SPACE_KEY_KEY,
    PARENT_PAGE_ID_KEY,
)

# Confluence Client Settings
CONFLUENCE_CLIENT_PAGE_LIMIT = 100


@dataclass
class ConfluenceSettings:
    base_url: Optional[str] = None
    username: Optional[str] = None
    api_token: Optional[str] = None
    space_key: Optional[str] = None
    parent_page_id: Optional[str] = None
    timeout: float = HTTP_TIMEOUT

    @property
    def has_credentials(self) -> bool:
        return bool(self.base_url and self.username and self.api_token)


def load_confluence_settings(store=None) -> ConfluenceSettings:
    """Environment variable first, then the persisted key, per field."""
    return ConfluenceSettings(
        base_url=resolve_setting("CONFLUENCE_BASE_URL", BASE_URL_KEY, store),
        username=resolve_setting("CONFLUENCE_USERNAME", USERNAME_KEY, store),
        api_token=resolve_setting("CONFLUENCE_API_TOKEN", API_TOKEN_KEY, store),
        space_key=resolve_setting("CONFLUENCE_SPACE_KEY", SPACE_KEY_KEY, store),
        parent_page_id=resolve_setting("CONFLUENCE_PARENT_PAGE_ID", PARENT_PAGE_ID_KEY, store),
    )
