import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from pydantic import ValidationError

from .models.annotations import AnnotationResult
from .schemas.annotations import AnnotateVideoResponse, VideoAnnotationResults

logger = logging.getLogger(__name__)


class AnnotationFormatError(ValueError):
    """Raised when an annotation document cannot be read."""


def parse_annotation_response(document: Any) -> AnnotationResult:
    """
    Parses an annotation document produced by the video annotation provider.

    A document holding "annotationResults" is read as an
    AnnotateVideoResponse and only its first result is used; any other
    JSON object is read as a bare VideoAnnotationResults.

    Raises:
        AnnotationFormatError: If the document holds no annotation results
            or does not match the provider schema.
    """
    if not isinstance(document, Mapping):
        raise AnnotationFormatError(
            f"Annotation document must be a JSON object, got {type(document).__name__}"
        )

    try:
        if "annotationResults" in document or "annotation_results" in document:
            results = AnnotateVideoResponse.model_validate(document).annotation_results
            logger.info(f"AnnotationResults count: {len(results)}")
            if not results:
                raise AnnotationFormatError("Annotation document holds no annotation results")
            result = results[0]
        else:
            result = VideoAnnotationResults.model_validate(document)
    except ValidationError as e:
        raise AnnotationFormatError(f"Invalid annotation document: {e}") from e

    return result.to_annotation_result()


def read_annotation_document(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Reads an annotation document stored as UTF-8 JSON.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AnnotationFormatError(f"Could not decode annotation file {path}: {e}") from e
