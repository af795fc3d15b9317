"""
Adapter for Google Cloud Vision TEXT_DETECTION responses.

The mobile client calls `images:annotate` itself; this module only reshapes
the JSON payload it received into the (text, lines) pair the parser takes.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# detectedBreak types that end a line
LINE_ENDING_BREAKS = {'EOL_SURE_SPACE', 'LINE_BREAK', 'HYPHEN'}
SPACE_BREAKS = {'SPACE', 'SURE_SPACE'}

MALFORMED_MESSAGE = 'Malformed Vision response'


class VisionResponseError(ValueError):
    """The Vision API reported an error for the image, or the body has the wrong shape."""


class NoTextDetectedError(VisionResponseError):
    """The Vision API found no text in the image."""


def _child_dict(node: Any, key: str) -> Dict[str, Any]:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, dict) else {}


def _child_dicts(node: Any, key: str) -> List[Dict[str, Any]]:
    """Dict entries of a list field; anything else is skipped."""
    value = node.get(key) if isinstance(node, dict) else None
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def extract_text_from_vision_response(payload: Dict[str, Any]) -> Tuple[str, Optional[List[str]]]:
    """
    Extract OCR text and line fragments from an annotate response.

    Args:
        payload: Parsed JSON body of an `images:annotate` response

    Returns:
        (text, lines); lines is None when the response has no
        fullTextAnnotation structure

    Raises:
        VisionResponseError: The response carries an error or is malformed
        NoTextDetectedError: The response has no text
    """
    responses = payload.get('responses') if isinstance(payload, dict) else None
    if not responses:
        raise NoTextDetectedError('No text detected in image')
    if not isinstance(responses, list):
        raise VisionResponseError(MALFORMED_MESSAGE)

    detection = responses[0] or {}
    if not isinstance(detection, dict):
        raise VisionResponseError(MALFORMED_MESSAGE)

    error = detection.get('error')
    if error:
        message = error.get('message') if isinstance(error, dict) else str(error)
        raise VisionResponseError(message or 'Vision API request failed')

    annotations = detection.get('textAnnotations') or []
    full_text = detection.get('fullTextAnnotation') or {}
    if not isinstance(annotations, list) or not isinstance(full_text, dict):
        raise VisionResponseError(MALFORMED_MESSAGE)

    if annotations:
        if not isinstance(annotations[0], dict):
            raise VisionResponseError(MALFORMED_MESSAGE)
        text = annotations[0].get('description') or ''
    else:
        text = full_text.get('text') or ''

    if not isinstance(text, str):
        raise VisionResponseError(MALFORMED_MESSAGE)
    if not text.strip():
        raise NoTextDetectedError('No text detected in image')

    lines = _lines_from_full_text(full_text)
    logger.debug("Vision response adapted", extra={
        "text_length": len(text),
        "line_count": len(lines) if lines else 0,
    })
    return text, lines


def _lines_from_full_text(full_text: Dict[str, Any]) -> Optional[List[str]]:
    """
    Rebuild text lines from the page/block/paragraph/word/symbol hierarchy.

    Symbols carry a detectedBreak telling what follows them; paragraphs
    always end a line. Nodes that are not objects are skipped.
    """
    lines: List[str] = []
    current: List[str] = []

    def flush():
        line = ''.join(current).strip()
        if line:
            lines.append(line)
        current.clear()

    for page in _child_dicts(full_text, 'pages'):
        for block in _child_dicts(page, 'blocks'):
            for paragraph in _child_dicts(block, 'paragraphs'):
                for word in _child_dicts(paragraph, 'words'):
                    for symbol in _child_dicts(word, 'symbols'):
                        symbol_text = symbol.get('text')
                        if isinstance(symbol_text, str):
                            current.append(symbol_text)
                        detected_break = _child_dict(
                            _child_dict(symbol, 'property'), 'detectedBreak'
                        ).get('type')
                        if detected_break in SPACE_BREAKS:
                            current.append(' ')
                        elif detected_break == 'HYPHEN':
                            current.append('-')
                            flush()
                        elif detected_break in LINE_ENDING_BREAKS:
                            flush()
                flush()

    return lines or None
