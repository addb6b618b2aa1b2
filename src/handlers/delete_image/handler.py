"""
Lambda handler responsible for deleting an entity image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.errors import NotFoundError, RecordStoreError
from core.services.image_consistency import default_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.time import utc_now_iso
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import DeleteImageRequest, DeleteImageResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image deletion requests.

    This function:
    - Extracts the target entity from API Gateway path parameters
    - Validates the incoming request payload
    - Delegates deletion to the image service
    - Translates domain errors into HTTP responses

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    try:
        request = validate_request(DeleteImageRequest, event.get("pathParameters") or {})
    except ValidationError as exc:
        logger.warning(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False, include_context=False)},
        )
        return ResponseBuilder.bad_request(
            "Missing or invalid required parameters.",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    identity_fields = request.identity_fields()
    service = default_image_service()

    try:
        record = service.delete_image(request.kind, request.identity())

    except NotFoundError as exc:
        logger.warning("Image not found during delete", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.not_found(exc.message, error=exc.error_code, request_id=request_id)

    except RecordStoreError as exc:
        logger.exception("Deletion failed", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.internal_error(exc.message, error=exc.error_code, request_id=request_id)

    metrics.add_dimension(name="kind", value=request.kind.value)
    metrics.add_metric(name="ImageDeleted", unit=MetricUnit.Count, value=1)

    response = DeleteImageResponse(
        message=f"{request.kind.value.capitalize()} image deleted.",
        kind=request.kind,
        key=record.storage_key,
        deleted_at=utc_now_iso(),
        **identity_fields,
    )

    return ResponseBuilder.ok(response.model_dump(mode="json", exclude_none=True), request_id=request_id)
