"""
Parse API router: turns recognized gift card text into pre-fill fields.
"""

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import date
import logging

from giftcard_ocr.config import settings
from giftcard_ocr.models.result import ParsedResult
from giftcard_ocr.services.parser import GiftCardParser
from giftcard_ocr.services.vision import (
    NoTextDetectedError,
    VisionResponseError,
    extract_text_from_vision_response,
)

router = APIRouter(prefix="/parse", tags=["parse"])
logger = logging.getLogger(__name__)

parser = GiftCardParser()


class ParseRequest(BaseModel):
    """Request model for parsing recognized text."""
    text: str
    lines: Optional[List[str]] = None
    today: Optional[date] = None  # Reference date override for testing


class ParseResponse(ParsedResult):
    """ParsedResult plus optional match provenance."""
    debug: Optional[Dict[str, Any]] = None


def _build_response(
    text: str,
    lines: Optional[List[str]],
    today: Optional[date],
    debug: bool
) -> ParseResponse:
    if len(text) > settings.MAX_TEXT_LENGTH:
        raise HTTPException(
            status_code=413,
            detail=f"Text too long: {len(text)} characters. Maximum: {settings.MAX_TEXT_LENGTH}"
        )

    debug_data: Optional[Dict[str, Any]] = {} if debug else None
    result = parser.parse(text, lines=lines, today=today, _debug=debug_data)

    logger.info("Gift card text parsed", extra={
        "fields_found": result.found_fields(),
        "confidence": result.confidence,
    })

    return ParseResponse(**result.model_dump(), debug=debug_data)


@router.post("", response_model=ParseResponse)
async def parse_text(request: ParseRequest, debug: bool = False):
    """
    Parse OCR text from a photographed gift card.

    Args:
        request: Recognized text and optional line fragments
        debug: Include match provenance in the response

    Returns:
        Extracted fields (null when not found) and an advisory confidence
    """
    return _build_response(request.text, request.lines, request.today, debug)


@router.post("/vision", response_model=ParseResponse)
async def parse_vision_response(payload: Dict[str, Any] = Body(...), debug: bool = False):
    """
    Parse a Google Cloud Vision `images:annotate` response body.

    Args:
        payload: Vision API JSON response as received by the client
        debug: Include match provenance in the response

    Returns:
        Extracted fields (null when not found) and an advisory confidence
    """
    try:
        text, lines = extract_text_from_vision_response(payload)
    except NoTextDetectedError:
        raise HTTPException(
            status_code=422,
            detail="No text detected. Make sure the card is well-lit and in focus."
        )
    except VisionResponseError as e:
        logger.warning("Vision response carried an error", extra={"error": str(e)})
        raise HTTPException(
            status_code=502,
            detail=f"Vision API error: {str(e)}"
        )

    return _build_response(text, lines, None, debug)
