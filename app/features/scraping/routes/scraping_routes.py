from fastapi import APIRouter, Depends, status

from app.features.scraping.dependencies import get_analyzer, get_assembler, get_pipeline
from app.features.scraping.exceptions import InvalidInputError
from app.features.scraping.schemas.document import Document
from app.features.scraping.schemas.requests import AnalyzeRequest, ScrapeRequest
from app.features.scraping.services.analysis.content_analyzer import ContentAnalyzer
from app.features.scraping.services.pipeline import ResultAssembler, ScrapePipeline
from app.platform.response import api_response

router = APIRouter(tags=["Scraping"])


@router.post(
    "/scrape",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Scrape a URL",
    description="Extract title, headings, links and a screenshot from a page and flag basic issues",
)
async def scrape_url(
    request: ScrapeRequest,
    pipeline: ScrapePipeline = Depends(get_pipeline),
    assembler: ResultAssembler = Depends(get_assembler),
):
    """
    Runs the scrape pipeline for one URL.

    **Example Request:**
```json
    {"url": "https://example.com", "save": true, "analyze": false}
```

    A page that could not be loaded still answers 200, with ``data.error`` set
    and empty headings/links/issues, so the caller can show the reason in context.
    """
    document, analysis = await pipeline.run(request.url, include_analysis=request.analyze)
    result = await assembler.assemble(document, analysis, persist=request.save)

    if result.error:
        message = f"Scrape failed: {result.error}"
    elif request.save and result.id is None:
        message = "Website scraped but the result could not be saved"
    else:
        message = "Website scraped successfully"

    return api_response(data=result, message=message, status_code=status.HTTP_200_OK)


@router.post(
    "/analyze",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Analyze scraped content",
    description="Summary, readability, keywords and sentiment for already-scraped page data",
)
async def analyze_content(
    request: AnalyzeRequest,
    analyzer: ContentAnalyzer = Depends(get_analyzer),
):
    if not request.url or not request.title:
        raise InvalidInputError("URL and title are required")

    document = Document(
        url=request.url,
        title=request.title,
        headings=request.headings,
        links=request.links,
        screenshot=request.screenshot,
    )
    analysis = await analyzer.summarize(document)

    return api_response(
        data=analysis,
        message="Content analyzed successfully",
        status_code=status.HTTP_200_OK,
    )
