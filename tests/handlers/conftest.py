import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

HANDLER_MODULES = (
    "handlers.upload_image.handler",
    "handlers.update_image.handler",
    "handlers.delete_image.handler",
    "handlers.get_image.handler",
)


@pytest.fixture
def lambda_context():
    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )


@pytest.fixture
def handler_service(monkeypatch, image_service):
    """Route every handler to the moto/SQLite backed service."""
    for module in HANDLER_MODULES:
        monkeypatch.setattr(f"{module}.default_image_service", lambda: image_service)
    return image_service


@pytest.fixture
def file_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway event carrying a base64 image body.

    Usage:
        event = file_event({"kind": "listing", "id": "7", "index": "0"}, png_bytes)
    """

    def _build(
        path_params: dict[str, str],
        file_data: bytes,
        content_type: str | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"file": base64.b64encode(file_data).decode("utf-8"), **extra}
        if content_type is not None:
            body["content_type"] = content_type

        return {
            "pathParameters": path_params,
            "body": json.dumps(body),
            "headers": {"Content-Type": "application/json"},
        }

    return _build
