import base64

import pytest
from pydantic import ValidationError

from handlers.upload_image.models import ImageUploadRequest, ImageUploadResponse


def test_upload_request_accepts_listing(sample_image_binary) -> None:
    request = ImageUploadRequest.model_validate(
        {
            "kind": "listing",
            "id": "7",
            "index": "2",
            "file": base64.b64encode(sample_image_binary).decode(),
            "content_type": "image/png",
        }
    )

    assert request.identity_fields() == {"id": 7, "index": 2}
    assert request.file_data() == sample_image_binary


def test_upload_request_content_type_length_limit(sample_image_binary) -> None:
    with pytest.raises(ValidationError):
        ImageUploadRequest.model_validate(
            {
                "kind": "profile",
                "id": 1,
                "file": base64.b64encode(sample_image_binary).decode(),
                "content_type": "image/" + "x" * 100,
            }
        )


def test_upload_response_omits_missing_index() -> None:
    response = ImageUploadResponse(
        message="Image upload complete.",
        kind="profile",
        id=1,
        key="assets/img/profile/a/ab/ab.png",
        image_url="https://cdn/assets/img/profile/a/ab/ab.png",
    )

    dumped = response.model_dump(mode="json", exclude_none=True)

    assert dumped["kind"] == "profile"
    assert "index" not in dumped
