"""CSP generation API endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cspgen.crawler.generator import generate_csp
from cspgen.crawler.targets import INVALID_URL_DETAILS, normalize_target_url
from cspgen.errors import CSPGenerationError, InvalidInputError
from cspgen.logging_config import crawl_context
from cspgen.models.csp import ErrorResponse, GenerateCSPRequest, GenerateCSPResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["csp"])


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body validation failures in the endpoint's error shape, as 400."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    if any("url" in err.get("loc", ()) for err in errors):
        body = ErrorResponse(error="Invalid URL", details=INVALID_URL_DETAILS, full_error=first.get("msg"))
    else:
        body = ErrorResponse(error="Invalid request", details=first.get("msg"))
    logger.info("request_rejected", path=request.url.path, error=body.error)
    return _error_response(400, body)


@router.post(
    "/generate-csp",
    response_model=GenerateCSPResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(body: GenerateCSPRequest):
    """Load the page in a headless browser and return a CSP for what it fetched."""
    if not body.url or not body.url.strip():
        return _error_response(400, ErrorResponse(error="URL is required"))

    try:
        target = normalize_target_url(body.url)
    except InvalidInputError as exc:
        return _error_response(400, ErrorResponse(error=exc.label, details=exc.details))

    with crawl_context(url=target) as run_id:
        try:
            csp = await generate_csp(target, body.use_wildcards)
        except CSPGenerationError as exc:
            return _error_response(
                exc.status_code,
                ErrorResponse(error=exc.label, details=exc.details, full_error=exc.detail_message),
            )
        except Exception as exc:
            logger.exception("csp_generation_error")
            return _error_response(
                500,
                ErrorResponse(
                    error="Failed to generate CSP",
                    details=f"Unexpected error (run {run_id})",
                    full_error=str(exc),
                ),
            )

    return GenerateCSPResponse(csp=csp)
