"""
Unit tests for attachment classification.
"""

from types import SimpleNamespace

import pytest

from fuku.services.AttachmentService.attachment_classifier import (
    classify,
    format_size,
    is_image_attachment,
    is_text_like,
    resolve_mime_type,
    split_attachments,
)


def _attachment(**fields) -> SimpleNamespace:
    defaults = {
        "url": "https://cdn.example.com/file",
        "filename": "",
        "content_type": None,
        "size": None,
        "width": None,
        "height": None,
    }
    defaults.update(fields)
    return SimpleNamespace(**defaults)


class TestClassify:
    @pytest.mark.parametrize("name", ["report.pdf", "notes.txt", "archive", ""])
    def test_declared_image_mime_wins_over_extension(self, name: str) -> None:
        result = classify(_attachment(filename=name, content_type="image/heic"))

        assert result["is_image"] is True
        assert result["mime_type"] == "image/heic"

    def test_image_extension_without_mime(self) -> None:
        result = classify(_attachment(filename="Cat.JPEG"))

        assert result["is_image"] is True
        assert result["mime_type"] == "image/jpeg"

    def test_dimensions_alone_mark_image_with_default_mime(self) -> None:
        result = classify(_attachment(filename="blob", width=640, height=480))

        assert result["is_image"] is True
        assert result["mime_type"] == "image/png"
        assert result["width"] == 640
        assert result["height"] == 480

    def test_single_dimension_is_not_enough(self) -> None:
        result = classify(_attachment(filename="blob", width=640))

        assert result["is_image"] is False
        assert result["mime_type"] == "application/octet-stream"

    def test_non_finite_dimensions_are_ignored(self) -> None:
        result = classify(
            _attachment(filename="blob", width=float("inf"), height=480)
        )

        assert result["is_image"] is False
        assert result["width"] is None

    def test_unknown_everything_defaults(self) -> None:
        result = classify(_attachment(filename="mystery.bin"))

        assert result["is_image"] is False
        assert result["mime_type"] == "application/octet-stream"
        assert result["size"] is None
        assert result["width"] is None
        assert result["height"] is None

    def test_declared_mime_wins_over_extension_table(self) -> None:
        result = classify(_attachment(filename="data.json", content_type="text/plain"))

        assert result["mime_type"] == "text/plain"

    def test_mapping_descriptor_with_camel_case_fields(self) -> None:
        result = classify(
            {
                "url": "https://cdn.example.com/a.csv",
                "name": "a.csv",
                "contentType": "text/csv",
                "size": 2048,
            }
        )

        assert result == {
            "is_image": False,
            "mime_type": "text/csv",
            "name": "a.csv",
            "size": 2048,
            "url": "https://cdn.example.com/a.csv",
            "width": None,
            "height": None,
        }

    def test_negative_size_is_unknown(self) -> None:
        assert classify(_attachment(filename="a.txt", size=-5))["size"] is None

    def test_missing_url_is_none(self) -> None:
        assert classify(_attachment(url="", filename="a.txt"))["url"] is None


class TestHelpers:
    def test_resolve_mime_type(self) -> None:
        assert resolve_mime_type("x.yml") == "application/x-yaml"
        assert resolve_mime_type("x.yml", "text/yaml") == "text/yaml"
        assert resolve_mime_type("x.unknown") == ""

    def test_is_image_attachment_uses_union_of_extensions(self) -> None:
        assert is_image_attachment("scan.tiff")
        assert is_image_attachment("old.bmp")
        assert not is_image_attachment("vector.svg")

    @pytest.mark.parametrize(
        ("name", "mime_type", "expected"),
        [
            ("a.bin", "text/html", True),
            ("config.yaml", "application/x-yaml", True),
            ("payload", "application/json", True),
            ("feed", "application/xml", True),
            ("slides.pdf", "application/pdf", False),
            ("", "", False),
        ],
    )
    def test_is_text_like(self, name: str, mime_type: str, expected: bool) -> None:
        assert is_text_like(name, mime_type) is expected


class TestSplitAttachments:
    def test_message_with_collection_values(self) -> None:
        image = _attachment(filename="cat.png")
        document = _attachment(filename="notes.md")
        other_image = _attachment(filename="dog.gif")
        collection = SimpleNamespace(
            values=lambda: iter([image, document, other_image])
        )
        message = SimpleNamespace(attachments=collection)

        batch = split_attachments(message)

        assert [item["name"] for item in batch["images"]] == ["cat.png", "dog.gif"]
        assert [item["name"] for item in batch["files"]] == ["notes.md"]
        assert batch["has_images"] is True
        assert batch["has_files"] is True

    def test_plain_list(self) -> None:
        batch = split_attachments([_attachment(filename="notes.md")])

        assert batch["images"] == []
        assert batch["has_images"] is False
        assert len(batch["files"]) == 1

    def test_none(self) -> None:
        batch = split_attachments(None)

        assert batch == {
            "images": [],
            "files": [],
            "has_images": False,
            "has_files": False,
        }


class TestFormatSize:
    @pytest.mark.parametrize(
        ("num_bytes", "expected"),
        [
            (0, "0 B"),
            (512, "512 B"),
            (1023, "1023 B"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (10 * 1024, "10 KB"),
            (1024**2, "1.0 MB"),
            (5 * 1024**2 + 300 * 1024, "5.3 MB"),
            (200 * 1024**2, "200 MB"),
            (3 * 1024**4, "3072 GB"),
        ],
    )
    def test_formats(self, num_bytes: int, expected: str) -> None:
        assert format_size(num_bytes) == expected

    @pytest.mark.parametrize(
        "num_bytes", [-1, float("nan"), float("inf"), None, "12"]
    )
    def test_unknown(self, num_bytes) -> None:
        assert format_size(num_bytes) == "unknown size"
