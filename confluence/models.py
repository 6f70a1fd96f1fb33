from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ConfluencePageContent(BaseModel):
    """A logical page as handed to the Confluence client."""
    title: str = Field(description="Page title, unique within the space")
    content: str = Field(description="Lightweight markup body")
    labels: List[str] = Field(default_factory=list)
    space_key: Optional[str] = None
    parent_id: Optional[str] = None


class RemotePage(BaseModel):
    """
    The fields of a Confluence content response that the client reads.
    Everything is optional; callers check for what they need.
    """
    id: Optional[str] = None
    title: Optional[str] = None
    version: Optional[int] = None
    space_key: Optional[str] = None
    webui: Optional[str] = None
    base: Optional[str] = None
    labels: List[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "RemotePage":
        data = data or {}

        version_info = data.get("version") or {}
        version = version_info.get("number") if isinstance(version_info, dict) else None

        space_info = data.get("space") or {}
        links = data.get("_links") or {}

        labels_info = (data.get("metadata") or {}).get("labels") or {}
        label_results = labels_info.get("results", []) if isinstance(labels_info, dict) else labels_info

        return cls(
            id=str(data["id"]) if data.get("id") is not None else None,
            title=data.get("title"),
            version=int(version) if version is not None else None,
            space_key=space_info.get("key") if isinstance(space_info, dict) else None,
            webui=links.get("webui"),
            base=links.get("base"),
            labels=[label.get("name") for label in label_results if isinstance(label, dict) and label.get("name")],
        )
