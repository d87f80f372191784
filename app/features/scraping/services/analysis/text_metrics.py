"""
Local, dependency-free text heuristics used when no language model is
configured (and as the fallback when the model call fails).
"""
import re
import string
from collections import Counter
from typing import Dict, List, Tuple
from urllib.parse import urlparse

from app.features.scraping.schemas.analysis import ReadabilityLevel, VisualContent
from app.features.scraping.schemas.document import Document

STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "is", "are", "was", "were",
    "to", "of", "in", "on", "at", "by", "for", "with", "about", "from",
    "this", "that", "these", "those", "it", "its", "they", "them",
    "have", "has", "had", "will", "would", "could", "should", "can", "may", "might",
})

POSITIVE_WORDS = frozenset({
    "good", "great", "best", "excellent", "amazing", "wonderful", "fantastic",
    "love", "like", "enjoy", "happy", "pleased", "satisfied", "perfect",
    "outstanding", "brilliant", "awesome", "incredible", "superb",
})

NEGATIVE_WORDS = frozenset({
    "bad", "terrible", "awful", "horrible", "worst", "hate", "dislike",
    "angry", "frustrated", "disappointed", "sad", "poor", "failed", "broken",
    "wrong", "error", "problem", "issue", "difficult",
})

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")
VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".avi", ".mov")

TOP_KEYWORD_COUNT = 5
NEUTRAL_READABILITY = 50.0

GENERIC_SUGGESTIONS = [
    "Content structure looks good - consider adding more interactive elements",
    "Optimize images for better loading performance",
    "Add internal links to improve navigation",
]


def document_text(document: Document) -> str:
    """Title, heading texts and link texts joined into one corpus."""
    heading_text = " ".join(h.text for h in document.headings)
    link_text = " ".join(link.text for link in document.links)
    return f"{document.title or ''} {heading_text} {link_text}"


def calculate_readability_score(text: str) -> float:
    """
    60 + 2 * (avg words per sentence) + 0.5 * (% of words longer than 6 chars),
    clamped to 0..100. Higher means harder to read.
    """
    words = text.split()
    sentences = [s for s in re.split(r"[.!?]+", text) if s]
    if not sentences or not words:
        return NEUTRAL_READABILITY

    avg_words_per_sentence = len(words) / len(sentences)
    long_word_pct = sum(1 for w in words if len(w) > 6) / len(words) * 100

    score = 60 + avg_words_per_sentence * 2 + long_word_pct / 2
    return max(0.0, min(100.0, score))


def readability_level(score: float) -> ReadabilityLevel:
    if score < 40:
        return ReadabilityLevel.easy
    if score < 70:
        return ReadabilityLevel.medium
    return ReadabilityLevel.hard


def tokenize_keywords(text: str) -> List[str]:
    cleaned = re.sub(r"[^\w\s]", "", text.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def calculate_keyword_density(text: str) -> Tuple[Dict[str, float], List[str]]:
    """
    Returns (density, top_keywords). Density is the percentage of filtered
    tokens, rounded to 2 dp. Ties keep first-occurrence order.
    """
    words = tokenize_keywords(text)
    if not words:
        return {}, []

    total = len(words)
    # Counter preserves first-occurrence order, and sorted() is stable
    density = {word: round(count / total * 100, 2) for word, count in Counter(words).items()}
    top = sorted(density, key=lambda word: density[word], reverse=True)[:TOP_KEYWORD_COUNT]
    return density, top


def calculate_sentiment(text: str) -> float:
    """(positive - negative) / (positive + negative). Tokens are trimmed of surrounding punctuation."""
    words = [w.strip(string.punctuation) for w in text.lower().split()]
    positive = sum(1 for w in words if w in POSITIVE_WORDS)
    negative = sum(1 for w in words if w in NEGATIVE_WORDS)
    if positive + negative == 0:
        return 0.0
    return (positive - negative) / (positive + negative)


def sentiment_label(score: float) -> str:
    if score > 0.3:
        return "Very Positive"
    if score > 0.1:
        return "Positive"
    if score > -0.1:
        return "Neutral"
    if score > -0.3:
        return "Negative"
    return "Very Negative"


def generate_summary(document: Document) -> str:
    subject = document.title or document.url
    h1s = [h.text for h in document.headings if h.level == 1 and h.text]
    h2s = [h.text for h in document.headings if h.level == 2 and h.text][:3]

    if h1s:
        summary = f"This page is about {subject}. The main topics covered are {', '.join(h1s)}"
        if h2s:
            summary += f" with subtopics including {', '.join(h2s)}"
        return summary + "."

    if h2s:
        return f"This page is about {subject} and covers topics like {', '.join(h2s)}."
    return f"This page is about {subject}."


def generate_suggestions(document: Document) -> List[str]:
    suggestions: List[str] = []

    h1_count = sum(1 for h in document.headings if h.level == 1)
    if h1_count == 0:
        suggestions.append("Add an H1 heading to improve SEO and content structure")
    elif h1_count > 1:
        suggestions.append("Consider using only one H1 heading per page for better SEO")

    broken = sum(1 for link in document.links if link.is_broken)
    if broken:
        suggestions.append(f"Fix the {broken} broken link(s) on this page")
    elif document.links:
        suggestions.append("Review all links to ensure they are working properly")

    if sum(len(h.text) for h in document.headings) < 300:
        suggestions.append("Consider adding more content to improve SEO and provide better value to users")

    if not document.screenshot:
        suggestions.append("Add visual elements or images to make the content more engaging")

    return suggestions or list(GENERIC_SUGGESTIONS)


def _has_extension(href: str, extensions: Tuple[str, ...]) -> bool:
    return urlparse(href).path.lower().endswith(extensions)


def analyze_visual_content(document: Document, visual_summary: str | None = None) -> VisualContent:
    """
    Counts images and videos among *link targets* by file extension. This is a
    proxy: embedded <img>/<video> elements are not inspected.
    """
    image_count = sum(1 for link in document.links if _has_extension(link.href, IMAGE_EXTENSIONS))
    video_count = sum(1 for link in document.links if _has_extension(link.href, VIDEO_EXTENSIONS))
    has_screenshot = bool(document.screenshot)

    if not visual_summary:
        parts = [
            "This page has been captured in a screenshot." if has_screenshot
            else "This page does not have a screenshot.",
            f"Found {image_count} image references." if image_count else "No image references found.",
            f"Found {video_count} video references." if video_count else "No video references found.",
        ]
        visual_summary = " ".join(parts)

    return VisualContent(
        image_count=image_count,
        video_count=video_count,
        has_screenshot=has_screenshot,
        visual_summary=visual_summary,
    )
