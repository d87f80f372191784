import re
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serialises camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Heading(CamelModel):
    level: int = Field(ge=1, le=6)
    text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _level_from_tag(cls, data: Any) -> Any:
        # Stored and client-sent headings may only carry {"tag": "h2", "text": ...}
        if isinstance(data, dict) and data.get("level") is None:
            match = re.fullmatch(r"h([1-6])", str(data.get("tag", "")).strip().lower())
            if match:
                data = {**data, "level": int(match.group(1))}
        return data

    @computed_field
    @property
    def tag(self) -> str:
        return f"h{self.level}"


class Link(CamelModel):
    href: str
    text: str = ""
    is_broken: bool = False


class Issue(CamelModel):
    type: str
    description: str
    severity: Severity
    element: Optional[str] = None


class Document(CamelModel):
    """Normalised extraction of one fetched page."""

    url: str
    title: Optional[str] = None
    headings: List[Heading] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    screenshot: Optional[str] = None
    issues: List[Issue] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failed(cls, url: str, error: str) -> "Document":
        return cls(url=url, error=error)


class FetchedPage(BaseModel):
    """What every fetch backend hands to the extractor."""

    url: str
    title: Optional[str] = None
    raw_html: str
    screenshot: Optional[str] = None
