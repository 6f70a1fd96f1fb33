import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from confluence.config import ConfluenceSettings, load_confluence_settings
from confluence.confluence_client import ConfluenceClient
from confluence.models import ConfluencePageContent
from extraction.models import SourceDocument
from extraction.workspace import parse_workspace
from notion.config import NotionSettings, load_notion_settings
from notion.notion_client import NotionClient
from pipeline.sessions import connect_confluence, connect_notion
from shared.errors import DocSyncError

logger = logging.getLogger(__name__)


class Target(Enum):
    NOTION = "notion"
    CONFLUENCE = "confluence"
    BOTH = "both"


class SyncOutcome(Enum):
    BOTH = "both"
    NOTION_ONLY = "notion_only"
    CONFLUENCE_ONLY = "confluence_only"
    NEITHER = "neither"


@dataclass
class SyncReport:
    title: str
    notion_ok: bool = False
    confluence_ok: bool = False
    notion_url: Optional[str] = None
    confluence_url: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def outcome(self) -> SyncOutcome:
        if self.notion_ok and self.confluence_ok:
            return SyncOutcome.BOTH
        if self.notion_ok:
            return SyncOutcome.NOTION_ONLY
        if self.confluence_ok:
            return SyncOutcome.CONFLUENCE_ONLY
        return SyncOutcome.NEITHER

    @property
    def message(self) -> str:
        return {
            SyncOutcome.BOTH: "Successfully synced to both Notion and Confluence!",
            SyncOutcome.NOTION_ONLY: "Synced to Notion only. Confluence sync failed.",
            SyncOutcome.CONFLUENCE_ONLY: "Synced to Confluence only. Notion sync failed.",
            SyncOutcome.NEITHER: "Failed to sync to both platforms.",
        }[self.outcome]


class SyncPipeline:
    """
    Drives one sync invocation. The only state kept between calls is
    the per-platform client, built on first use.
    """

    def __init__(self, notion_settings: NotionSettings, confluence_settings: ConfluenceSettings):
        self.notion_settings = notion_settings
        self.confluence_settings = confluence_settings
        self._notion: Optional[NotionClient] = None
        self._confluence: Optional[ConfluenceClient] = None

    @classmethod
    def from_environment(cls, store=None) -> "SyncPipeline":
        return cls(load_notion_settings(store), load_confluence_settings(store))

    def notion(self) -> NotionClient:
        self._notion = connect_notion(self.notion_settings, self._notion)
        return self._notion

    def confluence(self) -> ConfluenceClient:
        self._confluence = connect_confluence(self.confluence_settings, self._confluence)
        return self._confluence

    async def aclose(self):
        for client in (self._notion, self._confluence):
            if client is not None:
                await client.aclose()

    async def sync_to_notion(self, document: SourceDocument) -> str:
        url = await self.notion().upsert(document.title, document.content, document.language)
        logger.info(f"Synced {document.file_path} to Notion")
        return url

    async def sync_to_confluence(self, document: SourceDocument) -> str:
        page = ConfluencePageContent(
            title=document.title,
            content=document.content,
            labels=list(document.tags),
        )
        url = await self.confluence().sync(page)
        logger.info(f"Synced {document.file_path} to Confluence: {url}")
        return url

    async def sync_to_both(self, document: SourceDocument) -> SyncReport:
        """
        Notion first, then Confluence. A failure on one platform is
        recorded and never stops the other attempt.
        """
        report = SyncReport(title=document.title)

        try:
            report.notion_url = await self.sync_to_notion(document)
            report.notion_ok = True
        except Exception as e:
            logger.error(f"Notion sync failed: {e}")
            report.errors["notion"] = str(e)

        try:
            report.confluence_url = await self.sync_to_confluence(document)
            report.confluence_ok = True
        except Exception as e:
            logger.error(f"Confluence sync failed: {e}")
            report.errors["confluence"] = str(e)

        return report

    async def sync(self, document: SourceDocument, target: Target) -> SyncReport:
        if target is Target.BOTH:
            return await self.sync_to_both(document)

        report = SyncReport(title=document.title)
        if target is Target.NOTION:
            report.notion_url = await self.sync_to_notion(document)
            report.notion_ok = True
        else:
            report.confluence_url = await self.sync_to_confluence(document)
            report.confluence_ok = True
        return report

    async def sync_workspace(self, root: str, target: Target) -> List[SyncReport]:
        reports = []
        for document in parse_workspace(root):
            try:
                reports.append(await self.sync(document, target))
            except DocSyncError as e:
                logger.error(f"Failed to sync {document.file_path}: {e}")
                report = SyncReport(title=document.title)
                report.errors[target.value] = str(e)
                reports.append(report)
        return reports

    async def test_connections(self) -> Dict[str, bool]:
        results = {}
        for name, connect in (("notion", self.notion), ("confluence", self.confluence)):
            try:
                results[name] = await connect().test_connection()
            except DocSyncError as e:
                logger.info(f"{name} not connected: {e}")
                results[name] = False
        return results
