from html import escape
from typing import List

from app.features.scraping.schemas.document import Document, Heading, Issue, Link, Severity


class IssueAnalyzer:
    """Rule-based quality checks over an extracted Document. Pure and stateless."""

    TITLE_MIN_LENGTH = 10
    TITLE_MAX_LENGTH = 60

    NON_DESCRIPTIVE_LINK_TEXT = frozenset({
        "click here",
        "click",
        "here",
        "read more",
        "more",
        "learn more",
        "link",
        "this",
    })

    @staticmethod
    def analyze(document: Document) -> List[Issue]:
        issues: List[Issue] = []
        issues.extend(IssueAnalyzer._check_title(document.title))
        issues.extend(IssueAnalyzer._check_headings(document.headings))
        issues.extend(IssueAnalyzer._check_links(document.links))
        return issues

    @staticmethod
    def _check_title(title: str | None) -> List[Issue]:
        if not title or not title.strip():
            return [Issue(
                type="Missing Title",
                description="The page is missing a title which is important for SEO and accessibility.",
                severity=Severity.high,
            )]

        title = title.strip()
        element = f"<title>{escape(title)}</title>"
        if len(title) < IssueAnalyzer.TITLE_MIN_LENGTH:
            return [Issue(
                type="Short Title",
                description=f"The page title is very short ({len(title)} chars). Consider using a more descriptive title.",
                severity=Severity.medium,
                element=element,
            )]
        if len(title) > IssueAnalyzer.TITLE_MAX_LENGTH:
            return [Issue(
                type="Long Title",
                description=(
                    f"The page title is {len(title)} characters long. Titles over "
                    f"{IssueAnalyzer.TITLE_MAX_LENGTH} characters may be truncated in search results."
                ),
                severity=Severity.medium,
                element=element,
            )]
        return []

    @staticmethod
    def _check_headings(headings: List[Heading]) -> List[Issue]:
        issues: List[Issue] = []

        if not headings:
            issues.append(Issue(
                type="No Headings",
                description="The page has no headings which makes it difficult to understand the content structure.",
                severity=Severity.medium,
            ))

        h1s = [h for h in headings if h.level == 1]
        if not h1s:
            issues.append(Issue(
                type="Missing H1",
                description="The page is missing an H1 heading which is important for SEO and content hierarchy.",
                severity=Severity.high,
            ))
        elif len(h1s) > 1:
            issues.append(Issue(
                type="Multiple H1s",
                description=f"The page has {len(h1s)} H1 headings. It's best practice to have only one main H1 heading.",
                severity=Severity.medium,
                element=f"<h1>{escape(h1s[1].text)}</h1>",
            ))

        # Only skips going deeper are reported; jumping back up (h4 -> h2) is fine
        skips = [
            (prev, cur) for prev, cur in zip(headings, headings[1:])
            if cur.level > prev.level + 1
        ]
        if skips:
            prev, cur = skips[0]
            issues.append(Issue(
                type="Heading Hierarchy",
                description=(
                    f"The heading structure skips levels {len(skips)} time(s), "
                    f"e.g. from H{prev.level} directly to H{cur.level}."
                ),
                severity=Severity.medium,
                element=f"<{cur.tag}>{escape(cur.text)}</{cur.tag}>",
            ))

        empty = [h for h in headings if not h.text.strip()]
        if empty:
            issues.append(Issue(
                type="Empty Headings",
                description=f"The page contains {len(empty)} empty heading(s) which confuse screen readers.",
                severity=Severity.medium,
                element=f"<{empty[0].tag}></{empty[0].tag}>",
            ))

        return issues

    @staticmethod
    def _check_links(links: List[Link]) -> List[Issue]:
        issues: List[Issue] = []

        empty = [link for link in links if not link.text.strip()]
        if empty:
            issues.append(Issue(
                type="Empty Links",
                description=f"The page contains {len(empty)} links with no text which is bad for accessibility.",
                severity=Severity.medium,
                element=f'<a href="{escape(empty[0].href)}"></a>',
            ))

        vague = [
            link for link in links
            if link.text.strip().lower() in IssueAnalyzer.NON_DESCRIPTIVE_LINK_TEXT
        ]
        if vague:
            issues.append(Issue(
                type="Non-descriptive Links",
                description=(
                    f'The page contains {len(vague)} links with vague text such as "{vague[0].text.strip()}". '
                    "Link text should describe the destination."
                ),
                severity=Severity.low,
                element=IssueAnalyzer._anchor(vague[0]),
            ))

        broken = [link for link in links if link.is_broken]
        if broken:
            issues.append(Issue(
                type="Broken Links",
                description=f"The page contains {len(broken)} broken links that should be fixed.",
                severity=Severity.high,
                element=IssueAnalyzer._anchor(broken[0]),
            ))

        return issues

    @staticmethod
    def _anchor(link: Link) -> str:
        return f'<a href="{escape(link.href)}">{escape(link.text)}</a>'
