import hashlib

import pytest

from core.models.errors import InvalidMediaTypeError, ValidationError
from core.models.image import ImageKind
from core.utils.keys import (
    compute_content_hash,
    derive_storage_key,
    extension_for,
    normalize_mime_type,
)

HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


class TestComputeContentHash:
    def test_hash_matches_sha256_hex(self) -> None:
        assert compute_content_hash(b"hello") == HELLO_SHA256

    def test_hash_is_lowercase_and_64_chars(self, sample_image_binary) -> None:
        digest = compute_content_hash(sample_image_binary)

        assert len(digest) == 64
        assert digest == digest.lower()
        assert digest == hashlib.sha256(sample_image_binary).hexdigest()


class TestExtensionFor:
    @pytest.mark.parametrize(
        ("mime_type", "expected"),
        [
            ("image/jpeg", "jpg"),
            ("image/png", "png"),
            ("image/webp", "webp"),
            ("image/svg+xml", "svg"),
            ("image/avif", "avif"),
            ("IMAGE/PNG", "png"),
            ("image/png; charset=binary", "png"),
        ],
    )
    def test_known_and_verbatim_subtypes(self, mime_type, expected) -> None:
        assert extension_for(mime_type) == expected

    @pytest.mark.parametrize("mime_type", ["text/plain", "application/pdf", "", "imagepng"])
    def test_non_image_types_rejected(self, mime_type) -> None:
        with pytest.raises(InvalidMediaTypeError) as exc:
            extension_for(mime_type)

        assert exc.value.error_code == "UNSUPPORTED_MEDIA_TYPE"

    @pytest.mark.parametrize("mime_type", ["image/", "image/../etc", "image/a b"])
    def test_missing_or_unsafe_subtype_rejected(self, mime_type) -> None:
        with pytest.raises(InvalidMediaTypeError):
            extension_for(mime_type)


def test_normalize_mime_type_strips_parameters() -> None:
    assert normalize_mime_type(" Image/JPEG ; q=0.9") == "image/jpeg"


class TestDeriveStorageKey:
    def test_profile_png_layout(self) -> None:
        key = derive_storage_key(ImageKind.PROFILE, HELLO_SHA256, "image/png")

        assert key == f"assets/img/profile/2/2c/{HELLO_SHA256}.png"

    def test_listing_jpeg_uses_jpg_extension(self) -> None:
        key = derive_storage_key(ImageKind.LISTING, HELLO_SHA256, "image/jpeg")

        assert key == f"assets/img/listing/2/2c/{HELLO_SHA256}.jpg"

    def test_accepts_plain_string_kind(self) -> None:
        key = derive_storage_key("listing", HELLO_SHA256, "image/gif")

        assert key.startswith("assets/img/listing/")

    def test_same_bytes_same_key(self, sample_image_binary) -> None:
        first = derive_storage_key(ImageKind.PROFILE, compute_content_hash(sample_image_binary), "image/png")
        second = derive_storage_key(ImageKind.PROFILE, compute_content_hash(sample_image_binary), "image/png")

        assert first == second

    def test_kinds_do_not_share_keys(self) -> None:
        profile = derive_storage_key(ImageKind.PROFILE, HELLO_SHA256, "image/png")
        listing = derive_storage_key(ImageKind.LISTING, HELLO_SHA256, "image/png")

        assert profile != listing

    def test_key_segments_come_from_hash(self) -> None:
        content_hash = "ab" + "0" * 62
        key = derive_storage_key(ImageKind.PROFILE, content_hash, "image/png")

        _, _, kind, h0, h01, filename = key.split("/")
        assert (kind, h0, h01) == ("profile", "a", "ab")
        assert filename == f"{content_hash}.png"

    @pytest.mark.parametrize("content_hash", ["abc", "G" * 64, HELLO_SHA256.upper(), "", HELLO_SHA256 + "\n", " " + HELLO_SHA256])
    def test_malformed_hash_rejected(self, content_hash) -> None:
        with pytest.raises(ValidationError):
            derive_storage_key(ImageKind.PROFILE, content_hash, "image/png")

    def test_media_type_checked_before_hash(self) -> None:
        with pytest.raises(InvalidMediaTypeError):
            derive_storage_key(ImageKind.PROFILE, "not-a-hash", "text/plain")
