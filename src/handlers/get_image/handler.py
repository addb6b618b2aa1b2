"""
Lambda handler responsible for locating an entity image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.errors import BlobStoreError, NotFoundError, RecordStoreError
from core.services.image_consistency import default_image_service
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import GetImageRequest, GetImageResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image lookup requests.

    This function:
     - Default: return the public URL of the stored image
        - signed=true: return a presigned URL valid for expires_in seconds
    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        API Gateway-compatible response dictionary.
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image lookup request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "query_params": event.get("queryStringParameters"),
            "request_id": request_id,
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    params = {
        **path_params,
        "signed": query_params.get("signed", "false").lower() == "true",
    }
    if "expires_in" in query_params:
        params["expires_in"] = query_params["expires_in"]

    try:
        request = validate_request(GetImageRequest, params)
    except ValidationError as exc:
        logger.warning(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False, include_context=False)},
        )
        return ResponseBuilder.bad_request(
            "Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
            request_id=request_id,
        )

    identity_fields = request.identity_fields()
    service = default_image_service()

    try:
        key = service.locate_image(request.kind, request.identity())

        if request.signed:
            image_url = service.signed_url(key, expires_in=request.expires_in)
        else:
            image_url = service.public_url(key)

    except NotFoundError as exc:
        logger.info("Image not found", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.not_found(exc.message, error=exc.error_code, request_id=request_id)

    except (RecordStoreError, BlobStoreError) as exc:
        logger.exception("Image lookup failed", extra={"kind": request.kind.value, **identity_fields})
        return ResponseBuilder.internal_error(exc.message, error=exc.error_code, request_id=request_id)

    metrics.add_dimension(name="kind", value=request.kind.value)
    metrics.add_metric(name="ImageLocated", unit=MetricUnit.Count, value=1)

    response = GetImageResponse(
        kind=request.kind,
        key=key,
        image_url=image_url,
        expires_in=request.expires_in if request.signed else None,
        **identity_fields,
    )

    return ResponseBuilder.ok(response.model_dump(mode="json", exclude_none=True), request_id=request_id)
