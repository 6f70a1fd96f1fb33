import httpx
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from confluence.config import CONFLUENCE_CLIENT_PAGE_LIMIT, ConfluenceSettings
from confluence.models import ConfluencePageContent, RemotePage
from shared.errors import AuthenticationError, ConfigurationError, RemoteRequestError
from transform.confluence_storage import to_storage
from transform.storage_check import storage_problems

logger = logging.getLogger(__name__)

PLATFORM = "confluence"


class ConfluenceClient:
    def __init__(self, settings: ConfluenceSettings, http_client: Optional[httpx.AsyncClient] = None):
        if not settings.has_credentials:
            raise AuthenticationError(
                "Confluence not authenticated. Run `docsync configure confluence` "
                "or set CONFLUENCE_BASE_URL, CONFLUENCE_USERNAME and CONFLUENCE_API_TOKEN."
            )

        self.settings = settings
        base = settings.base_url.rstrip("/")

        # Always keep domain only (no /wiki duplication issues)
        if base.endswith("/wiki"):
            self.domain = base[:-5]
        else:
            self.domain = base

        # Canonical API base for Confluence Cloud
        self.base_url = self.domain + "/wiki/rest/api/"

        self.auth = (settings.username, settings.api_token)
        self.timeout = httpx.Timeout(settings.timeout, connect=60.0)
        self.limits = httpx.Limits(max_keepalive_connections=5, max_connections=10)
        self._client = http_client

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self.limits,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Dict[str, Any] = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Single-shot request. Any transport or HTTP error comes back as
        RemoteRequestError carrying the platform's status and message.
        """
        if endpoint.startswith("http"):
            url = endpoint
        else:
            url = urljoin(self.base_url, endpoint)

        try:
            response = await self._http().request(
                method,
                url,
                params=params,
                json=json,
                auth=self.auth,
            )
            if response.status_code == 429:
                logger.warning(f"Rate limited by Confluence (Retry-After={response.headers.get('Retry-After')})")
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"Client error {e.response.status_code} for {method} {url}: {message}")
            raise RemoteRequestError(PLATFORM, message, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Request error for {method} {url}: {e}")
            raise RemoteRequestError(PLATFORM, str(e)) from e

    def page_url(self, page: RemotePage) -> str:
        """Human-facing URL from the response's _links.webui."""
        webui = page.webui or ""
        if not webui or webui.startswith("http"):
            return webui
        base = (page.base or self.domain + "/wiki").rstrip("/")
        return base + webui

    async def find_page_by_title(self, title: str, space_key: str) -> Optional[RemotePage]:
        """
        First page in the space with exactly this title, or None.
        Lookup failures count as "not found".
        """
        try:
            response = await self._make_request(
                "GET",
                "content",
                {"spaceKey": space_key, "title": title, "expand": "version"},
            )
        except RemoteRequestError as e:
            logger.warning(f"Lookup of '{title}' in {space_key} failed, treating as not found: {e}")
            return None

        try:
            results = _results(response)
        except RemoteRequestError as e:
            logger.warning(f"Lookup of '{title}' in {space_key} returned {e}, treating as not found")
            return None

        if not results:
            return None
        if len(results) > 1:
            logger.warning(f"{len(results)} pages titled '{title}' in {space_key}, using the first")
        return RemotePage.from_api(results[0])

    async def get_current_version(self, page_id: str) -> int:
        response = await self._make_request("GET", f"content/{page_id}", {"expand": "version"})
        page = RemotePage.from_api(_json(response))
        if page.version is None:
            raise RemoteRequestError(PLATFORM, f"Page {page_id} response carries no version number")
        return page.version

    def _storage_body(self, content: str) -> Dict[str, Any]:
        storage = to_storage(content)
        problems = storage_problems(storage)
        if problems:
            logger.warning(f"Storage body is not well formed, Confluence may reject it: {problems[0]}")
        return {"storage": {"value": storage, "representation": "storage"}}

    async def create_page(
        self,
        title: str,
        content: str,
        space_key: str,
        parent_id: Optional[str] = None,
        labels: Optional[List[str]] = None,
    ) -> RemotePage:
        data: Dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": self._storage_body(content),
        }

        if parent_id:
            data["ancestors"] = [{"id": parent_id}]

        if labels:
            data["metadata"] = {"labels": [{"name": label} for label in labels]}

        response = await self._make_request("POST", "content", json=data)
        page = RemotePage.from_api(_json(response))
        logger.info(f"Created Confluence page {page.id} ('{title}') in {space_key}")
        return page

    async def update_page(
        self,
        page_id: str,
        title: str,
        content: str,
        labels: Optional[List[str]] = None,
    ) -> RemotePage:
        current_version = await self.get_current_version(page_id)

        data = {
            "version": {"number": current_version + 1},
            "title": title,
            "type": "page",
            "body": self._storage_body(content),
        }

        response = await self._make_request("PUT", f"content/{page_id}", json=data)

        if labels:
            await self.update_labels(page_id, labels)

        page = RemotePage.from_api(_json(response))
        logger.info(f"Updated Confluence page {page_id} to version {current_version + 1}")
        return page

    async def update_labels(self, page_id: str, labels: List[str]):
        label_data = [{"prefix": "global", "name": label} for label in labels]
        await self._make_request("POST", f"content/{page_id}/label", json=label_data)

    async def upsert(
        self,
        title: str,
        content: str,
        space_key: Optional[str] = None,
        parent_id: Optional[str] = None,
        labels: Optional[List[str]] = None,
    ) -> str:
        """
        Update the page titled `title` in the space with a version bump,
        or create it. Returns the page URL.
        """
        space_key = space_key or self.settings.space_key
        if not space_key:
            raise ConfigurationError(
                "Confluence space key not configured. Set CONFLUENCE_SPACE_KEY "
                "or run `docsync configure confluence`."
            )

        existing = await self.find_page_by_title(title, space_key)

        if existing and existing.id:
            page = await self.update_page(existing.id, title, content, labels)
        else:
            parent_id = parent_id or self.settings.parent_page_id
            page = await self.create_page(title, content, space_key, parent_id, labels)

        return self.page_url(page)

    async def sync(self, page: ConfluencePageContent) -> str:
        return await self.upsert(
            page.title,
            page.content,
            space_key=page.space_key,
            parent_id=page.parent_id,
            labels=page.labels,
        )

    async def test_connection(self) -> bool:
        try:
            response = await self._make_request("GET", "space", {"limit": 1})
        except RemoteRequestError as e:
            logger.error(f"Confluence connection test failed: {e}")
            return False
        return response.status_code == 200

    async def get_spaces(self) -> List[Dict[str, Any]]:
        try:
            response = await self._make_request("GET", "space")
        except RemoteRequestError as e:
            logger.error(f"Error getting spaces: {e}")
            return []
        return _listing(response, "spaces")

    async def get_pages(self, space_key: str) -> List[Dict[str, Any]]:
        try:
            response = await self._make_request(
                "GET",
                "content",
                {"spaceKey": space_key, "type": "page", "limit": CONFLUENCE_CLIENT_PAGE_LIMIT},
            )
        except RemoteRequestError as e:
            logger.error(f"Error getting pages for {space_key}: {e}")
            return []
        return _listing(response, f"pages for {space_key}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(body)[:500]


def _json(response: httpx.Response) -> Dict[str, Any]:
    """Decode a success body, which must be a JSON object."""
    try:
        body = response.json()
    except ValueError as e:
        raise RemoteRequestError(PLATFORM, "invalid JSON response", response.status_code) from e
    if not isinstance(body, dict):
        raise RemoteRequestError(PLATFORM, "unexpected response shape", response.status_code)
    return body


def _results(response: httpx.Response) -> List[Dict[str, Any]]:
    results = _json(response).get("results") or []
    if not isinstance(results, list):
        raise RemoteRequestError(PLATFORM, "unexpected response shape", response.status_code)
    return [item for item in results if isinstance(item, dict)]


def _listing(response: httpx.Response, what: str) -> List[Dict[str, Any]]:
    try:
        return _results(response)
    except RemoteRequestError as e:
        logger.error(f"Error getting {what}: {e}")
        return []
