from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import Field

from app.features.scraping.schemas.document import CamelModel


class ReadabilityLevel(str, Enum):
    easy = "Easy"
    medium = "Medium"
    hard = "Hard"


class VisualContent(CamelModel):
    image_count: int = 0
    video_count: int = 0
    has_screenshot: bool = False
    visual_summary: str = ""


class ContentAnalysis(CamelModel):
    summary: str
    content_summary: str
    readability_score: float = Field(ge=0, le=100)
    readability_level: ReadabilityLevel
    keyword_density: Dict[str, float] = Field(default_factory=dict)
    top_keywords: List[str] = Field(default_factory=list)
    sentiment_score: float = Field(ge=-1, le=1)
    sentiment_analysis: str
    suggestions: List[str] = Field(min_length=1)
    visual_content: VisualContent
    source: Literal["llm", "heuristic"] = "heuristic"


class LLMContentReply(CamelModel):
    """Shape the model is asked to answer with."""

    content_summary: str = Field(min_length=1)
    readability_score: float = Field(ge=0, le=100)
    readability_level: ReadabilityLevel
    top_keywords: List[str] = Field(default_factory=list)
    sentiment_score: float = Field(ge=-1, le=1)
    sentiment_analysis: str
    suggestions: List[str] = Field(min_length=1)
    visual_summary: Optional[str] = None
