"""
Lambda handler responsible for replacing an entity image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import (
    AlreadyExistsError,
    BlobStoreError,
    InvalidMediaTypeError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from core.services.image_consistency import default_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.mime import resolve_mime_type
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, sanitize_validation_errors, validate_request

from .models import ImageUpdateRequest, ImageUpdateResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image update requests.

    Replaces the image of an existing profile or listing slot. Listing
    images may also be moved to another index with ``new_index``.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image update request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "request_id": request_id,
        },
    )

    try:
        body = parse_json_body(event)
    except ValueError as exc:
        logger.warning("Invalid JSON body received", extra={"error": str(exc)})
        return ResponseBuilder.bad_request(str(exc), request_id=request_id)

    try:
        request = validate_request(
            ImageUpdateRequest,
            {**body, **(event.get("pathParameters") or {})},
        )
    except PydanticValidationError as exc:
        logger.warning(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False, include_context=False, include_input=False)},
        )
        return ResponseBuilder.bad_request(
            "Missing or invalid required parameters.",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    identity_fields = request.identity_fields()
    service = default_image_service()

    try:
        file_data = request.file_data()
        mime_type = resolve_mime_type(file_data, request.content_type)
        key = service.replace_image(
            request.kind,
            request.identity(),
            file_data,
            mime_type,
            new_index=request.new_index,
        )

    except (ValidationError, InvalidMediaTypeError) as exc:
        logger.warning("Image update rejected", extra={"error_code": exc.error_code, **identity_fields})
        return ResponseBuilder.bad_request(exc.message, error=exc.error_code, request_id=request_id)

    except NotFoundError as exc:
        logger.warning("Image not found during update", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.not_found(exc.message, error=exc.error_code, request_id=request_id)

    except AlreadyExistsError as exc:
        logger.warning("Target index already taken", extra={"new_index": request.new_index, **identity_fields})
        return ResponseBuilder.conflict(exc.message, error=exc.error_code, request_id=request_id)

    except (RecordStoreError, BlobStoreError) as exc:
        logger.exception(
            "Infrastructure error during image update",
            extra={"kind": request.kind.value, **identity_fields},
        )
        return ResponseBuilder.internal_error(exc.message, error=exc.error_code, request_id=request_id)

    metrics.add_dimension(name="kind", value=request.kind.value)
    metrics.add_metric(name="ImageReplaced", unit=MetricUnit.Count, value=1)

    response = ImageUpdateResponse(
        message="Image updated.",
        kind=request.kind,
        id=request.id,
        index=request.new_index if request.new_index is not None else request.index,
        key=key,
        image_url=service.public_url(key),
    )

    return ResponseBuilder.ok(response.model_dump(mode="json", exclude_none=True), request_id=request_id)
