"""
Lambda handler responsible for creating an entity image.
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
    RecordStoreError,
    ValidationError,
)
from core.services.image_consistency import default_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.mime import resolve_mime_type
from core.utils.response import ResponseBuilder
from core.utils.validators import parse_json_body, sanitize_validation_errors, validate_request

from .models import ImageUploadRequest, ImageUploadResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    The handler validates the target entity and the base64-encoded file,
    stores the image and returns its storage key and public URL.

    Expected API Gateway event structure:
    {
        "pathParameters": {"kind": "listing", "id": "7", "index": "0"},
        "body": "{\"file\": \"<base64>\", \"content_type\": \"image/png\"}"
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload payload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image upload request",
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
            ImageUploadRequest,
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
        key = service.create_image(request.kind, request.identity(), file_data, mime_type)

    except (ValidationError, InvalidMediaTypeError) as exc:
        logger.warning("Image upload rejected", extra={"error_code": exc.error_code, **identity_fields})
        return ResponseBuilder.bad_request(exc.message, error=exc.error_code, request_id=request_id)

    except AlreadyExistsError as exc:
        logger.warning("Image already exists", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.conflict(exc.message, error=exc.error_code, request_id=request_id)

    except (RecordStoreError, BlobStoreError) as exc:
        logger.exception(
            "Infrastructure error during image upload",
            extra={"kind": request.kind.value, **identity_fields},
        )
        return ResponseBuilder.internal_error(exc.message, error=exc.error_code, request_id=request_id)

    metrics.add_dimension(name="kind", value=request.kind.value)
    metrics.add_metric(name="ImageCreated", unit=MetricUnit.Count, value=1)

    response = ImageUploadResponse(
        message="Image upload complete.",
        kind=request.kind,
        key=key,
        image_url=service.public_url(key),
        **identity_fields,
    )

    return ResponseBuilder.created(response.model_dump(mode="json", exclude_none=True), request_id=request_id)
