import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from app.features.scraping.schemas.analysis import ContentAnalysis, LLMContentReply
from app.features.scraping.schemas.document import Document
from app.features.scraping.services.analysis import text_metrics
from app.platform.config import settings

logger = logging.getLogger(__name__)

# Links sent to the model are capped to keep the prompt small
MAX_PROMPT_LINKS = 20


class ContentAnalyzer(ABC):
    @abstractmethod
    async def summarize(self, document: Document) -> ContentAnalysis:
        ...


class HeuristicContentAnalyzer(ContentAnalyzer):
    """Summary, readability, keywords and sentiment from local heuristics only."""

    async def summarize(self, document: Document) -> ContentAnalysis:
        return self.analyze(document)

    @staticmethod
    def analyze(document: Document) -> ContentAnalysis:
        text = text_metrics.document_text(document)
        summary = text_metrics.generate_summary(document)
        readability = text_metrics.calculate_readability_score(text)
        density, top_keywords = text_metrics.calculate_keyword_density(text)
        sentiment = text_metrics.calculate_sentiment(text)

        return ContentAnalysis(
            summary=summary,
            content_summary=summary,
            readability_score=readability,
            readability_level=text_metrics.readability_level(readability),
            keyword_density=density,
            top_keywords=top_keywords,
            sentiment_score=sentiment,
            sentiment_analysis=text_metrics.sentiment_label(sentiment),
            suggestions=text_metrics.generate_suggestions(document),
            visual_content=text_metrics.analyze_visual_content(document),
            source="heuristic",
        )


class OpenAIContentAnalyzer(ContentAnalyzer):
    """
    Asks a hosted model for the analysis. Any failure (API error, empty or
    malformed reply, out-of-range values) falls back to the heuristics, so
    callers always get an analysis.
    """

    SYSTEM_PROMPT = (
        "You are a content analysis expert. Analyze web content and provide detailed "
        "insights in JSON format. Be precise and helpful."
    )

    def __init__(
        self,
        api_key: str,
        model: str = settings.OPENAI_MODEL,
        base_url: Optional[str] = settings.OPENAI_BASE_URL,
        timeout: float = settings.LLM_TIMEOUT_SECONDS,
        client: Optional[OpenAI] = None,
        fallback: Optional[ContentAnalyzer] = None,
    ):
        self.model = model
        self.client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.fallback = fallback or HeuristicContentAnalyzer()

    async def summarize(self, document: Document) -> ContentAnalysis:
        try:
            reply = await asyncio.to_thread(self._call_llm, self._build_prompt(document))
        except (OpenAIError, ValueError, ValidationError) as e:
            logger.warning(f"LLM content analysis failed for {document.url}, using heuristics: {e}")
            return await self.fallback.summarize(document)

        text = text_metrics.document_text(document)
        density, _ = text_metrics.calculate_keyword_density(text)

        logger.info(f"LLM content analysis completed for {document.url}")
        return ContentAnalysis(
            summary=reply.content_summary,
            content_summary=reply.content_summary,
            readability_score=reply.readability_score,
            readability_level=reply.readability_level,
            keyword_density=density,
            top_keywords=reply.top_keywords,
            sentiment_score=reply.sentiment_score,
            sentiment_analysis=reply.sentiment_analysis,
            suggestions=reply.suggestions,
            visual_content=text_metrics.analyze_visual_content(document, reply.visual_summary),
            source="llm",
        )

    @staticmethod
    def _build_prompt(document: Document) -> str:
        headings = "\n".join(f"H{h.level}: {h.text}" for h in document.headings)
        links = "\n".join(link.text or link.href for link in document.links[:MAX_PROMPT_LINKS])

        return f"""
Analyze the following website content and provide a comprehensive analysis:

URL: {document.url}
Title: {document.title or ''}

Headings:
{headings}

Links (sample):
{links}

Has Screenshot: {'Yes' if document.screenshot else 'No'}

Please provide:
1. A detailed content summary (2-3 sentences)
2. Readability assessment (score 0-100, where 0 is very easy, 100 is very difficult)
3. Top 5 keywords from the content
4. Sentiment analysis (score -1 to 1, where -1 is very negative, 1 is very positive)
5. 3-5 content improvement suggestions
6. Visual content analysis if screenshot is available

Format your response as JSON with the following structure:
{{
  "contentSummary": "string",
  "readabilityScore": number,
  "readabilityLevel": "Easy|Medium|Hard",
  "topKeywords": ["string"],
  "sentimentScore": number,
  "sentimentAnalysis": "string",
  "suggestions": ["string"],
  "visualSummary": "string"
}}

Do not include any text before or after the JSON. Only output valid JSON.
"""

    def _call_llm(self, prompt: str) -> LLMContentReply:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.3,
            max_tokens=1000,
        )

        response_text = completion.choices[0].message.content if completion.choices else None
        if not response_text:
            raise ValueError("No response from language model")

        return LLMContentReply.model_validate(parse_json_reply(response_text))


def parse_json_reply(response_text: str) -> Dict[str, Any]:
    """Parse a JSON object out of a model reply, tolerating markdown code fences."""
    try:
        data = json.loads(response_text)
    except json.JSONDecodeError:
        cleaned = response_text.strip()
        if cleaned.startswith("```"):
            cleaned = cleaned.replace("```json", "").replace("```", "").strip()

        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise
        data = json.loads(cleaned[start:end + 1])

    if not isinstance(data, dict):
        raise ValueError("Model reply is not a JSON object")
    return data


def get_content_analyzer() -> ContentAnalyzer:
    """Model-backed when an API key is configured, heuristic otherwise."""
    if settings.OPENAI_API_KEY:
        return OpenAIContentAnalyzer(api_key=settings.OPENAI_API_KEY)
    return HeuristicContentAnalyzer()
