from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from app.features.scraping.schemas.analysis import ContentAnalysis
from app.features.scraping.schemas.document import CamelModel, Document, Heading, Issue, Link


class ScrapeRequest(CamelModel):
    url: str
    save: bool = False
    analyze: bool = False


class AnalyzeRequest(CamelModel):
    url: Optional[str] = None
    title: Optional[str] = None
    headings: List[Heading] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    screenshot: Optional[str] = None


class SaveResultRequest(CamelModel):
    url: Optional[str] = None
    title: Optional[str] = None
    headings: List[Heading] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    screenshot: Optional[str] = None
    issues: List[Issue] = Field(default_factory=list)
    analysis: Optional[ContentAnalysis] = None


class DeleteResultsRequest(CamelModel):
    id: Optional[str] = None
    ids: Optional[List[str]] = None


class ScrapeResult(Document):
    """A Document plus optional analysis and, once stored, its id and timestamp."""

    analysis: Optional[ContentAnalysis] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
