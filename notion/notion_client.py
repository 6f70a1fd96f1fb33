import httpx
import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from notion.config import NOTION_APPEND_BATCH, NOTION_VERSION, NotionSettings
from shared.config import clean_value, mask_secret
from shared.errors import (
    AuthenticationError,
    ConfigurationError,
    FallbackExhaustedError,
    RemoteRequestError,
)
from transform.notion_blocks import to_blocks, to_notion_children

logger = logging.getLogger(__name__)

PLATFORM = "notion"

_HEX_ID = re.compile(r"([0-9a-f]{32})", re.IGNORECASE)
_DASHED_ID = re.compile(r"([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})", re.IGNORECASE)
_ID_CANDIDATE = re.compile(r"([0-9a-f-]{32,36})", re.IGNORECASE)


def extract_database_id(raw: Optional[str]) -> Optional[str]:
    """
    Pull a database/page id out of a bare id or a full Notion URL.

    Tries a 32-hex id, then a dashed UUID, then the last path segment
    of a URL. Returns None when nothing id-like is found.
    """
    value = clean_value(raw)
    if not value:
        return None

    match = _HEX_ID.search(value)
    if match:
        return match.group(1)

    match = _DASHED_ID.search(value)
    if match:
        return match.group(1)

    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        parts = [p for p in parsed.path.split("/") if p]
        if parts:
            match = _ID_CANDIDATE.search(parts[-1])
            if match:
                return match.group(1)

    return None


class NotionClient:
    def __init__(self, settings: NotionSettings, http_client: Optional[httpx.AsyncClient] = None):
        if not settings.api_key:
            raise AuthenticationError(
                "Notion not authenticated. Run `docsync configure notion` or set NOTION_API_KEY."
            )

        self.settings = settings
        self.base_url = settings.api_url
        self.headers = {
            "Authorization": f"Bearer {settings.api_key}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }
        self.timeout = httpx.Timeout(settings.timeout, connect=60.0)
        self._client = http_client

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _make_request(self, method: str, endpoint: str, json: Any = None) -> Dict[str, Any]:
        url = urljoin(self.base_url, endpoint)

        try:
            response = await self._http().request(method, url, json=json, headers=self.headers)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"Notion error {e.response.status_code} for {method} {url}: {message}")
            raise RemoteRequestError(PLATFORM, message, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise RemoteRequestError(PLATFORM, str(e)) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Notion returned a non-JSON body for {method} {url}")
            raise RemoteRequestError(PLATFORM, "invalid JSON response", response.status_code) from e
        if not isinstance(body, dict):
            raise RemoteRequestError(PLATFORM, "unexpected response shape", response.status_code)
        return body

    def resolve_database_id(self, raw: Optional[str] = None) -> str:
        raw = raw if raw is not None else self.settings.database_id
        database_id = extract_database_id(raw)
        if not database_id:
            logger.error(f"Failed to parse NOTION_DATABASE_ID. Raw input (masked): {mask_secret(raw)}")
            raise ConfigurationError(
                "Database ID not configured. Set NOTION_DATABASE_ID (ID or full URL) "
                "or run `docsync configure notion`."
            )
        return database_id

    async def create_database_page(self, database_id: str, title: str) -> Dict[str, Any]:
        return await self._make_request(
            "POST",
            "pages",
            {
                "parent": {"database_id": database_id},
                "properties": {
                    self.settings.title_property: {
                        "title": [{"text": {"content": title}}]
                    }
                },
            },
        )

    async def create_child_page(self, parent_page_id: str) -> Dict[str, Any]:
        return await self._make_request(
            "POST",
            "pages",
            {"parent": {"page_id": parent_page_id}, "properties": {}},
        )

    async def append_blocks(self, block_id: str, children: List[Dict[str, Any]]):
        for start in range(0, len(children), NOTION_APPEND_BATCH):
            await self._make_request(
                "PATCH",
                f"blocks/{block_id}/children",
                {"children": children[start:start + NOTION_APPEND_BATCH]},
            )

    async def _create_as_child_page(self, parent_id: str, title: str, content: str, language: str) -> Dict[str, Any]:
        page = await self.create_child_page(parent_id)
        logger.info(f"Created Notion child page {page.get('id')} under {parent_id}")

        children = to_notion_children(to_blocks(f"# {title}\n\n{content}", language))
        if children:
            await self.append_blocks(_page_id(page), children)
            logger.info(f"Appended {len(children)} blocks to Notion child page {page.get('id')}")
        return page

    async def upsert(self, title: str, content: str, language: str, database_id: Optional[str] = None) -> str:
        """
        Create a page for the document and return its URL.

        Step 1 creates the page under the configured database. If that
        create call is rejected (usually because the id is a page, not a
        database), step 2 creates a child page under the same id with the
        title as a leading heading. A failure in step 2 is final.
        """
        target_id = self.resolve_database_id(database_id)

        try:
            page = await self.create_database_page(target_id, title)
        except RemoteRequestError as database_error:
            logger.warning(f"Creating under database {target_id} failed, retrying as child page: {database_error}")
            try:
                page = await self._create_as_child_page(target_id, title, content, language)
            except RemoteRequestError as fallback_error:
                logger.error(f"Creating Notion child page under {target_id} failed: {fallback_error}")
                raise FallbackExhaustedError(database_error, fallback_error) from fallback_error
            return page.get("url", "")

        logger.info(f"Created Notion page {page.get('id')} in database {target_id}")
        children = to_notion_children(to_blocks(content, language))
        if children:
            await self.append_blocks(_page_id(page), children)
            logger.info(f"Appended {len(children)} blocks to Notion page {page.get('id')}")
        return page.get("url", "")

    async def test_connection(self) -> bool:
        try:
            await self._make_request("GET", "users/me")
        except RemoteRequestError:
            return False
        return True

    async def list_databases(self) -> List[Tuple[str, str]]:
        data = await self._make_request(
            "POST",
            "search",
            {
                "filter": {"property": "object", "value": "database"},
                "sort": {"direction": "descending", "timestamp": "last_edited_time"},
            },
        )
        databases = []
        for result in data.get("results") or []:
            title_parts = result.get("title") or []
            title = title_parts[0].get("plain_text") if title_parts else None
            databases.append((result.get("id", ""), title or "Untitled"))
        return databases


def _page_id(page: Dict[str, Any]) -> str:
    if not page.get("id"):
        raise RemoteRequestError(PLATFORM, "Page create response carries no id")
    return page["id"]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)[:500]
