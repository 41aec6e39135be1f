from __future__ import annotations

import pytest

from optipic.request import (
    ALPHA_FORMATS,
    EncodeRequest,
    Explicit,
    Preset,
    Resize,
    build_request,
    parse_quality,
    resolve_background,
    resolve_format,
    should_flatten,
)


@pytest.mark.parametrize(
    ("ext", "expected"),
    [
        ("jpg", "jpeg"),
        ("jpeg", "jpeg"),
        ("png", "png"),
        ("webp", "webp"),
        ("avif", "avif"),
        ("tiff", "tiff"),
        ("gif", "gif"),
        ("", "jpeg"),
        ("bmp", "jpeg"),
        ("tif", "jpeg"),
        (None, "jpeg"),
    ],
)
def test_resolve_format_auto_uses_source_extension(ext, expected: str) -> None:
    assert resolve_format("auto", ext) == expected


@pytest.mark.parametrize("ext", ["png", "gif", "", "webp"])
def test_resolve_format_jpg_is_always_jpeg(ext: str) -> None:
    assert resolve_format("jpg", ext) == "jpeg"


def test_resolve_format_explicit_wins_over_extension() -> None:
    assert resolve_format("webp", "png") == "webp"
    assert resolve_format("AVIF", "png") == "avif"
    assert resolve_format("bmp", "png") == "jpeg"
    assert resolve_format(None, "gif") == "gif"


def test_should_flatten_only_for_formats_without_alpha() -> None:
    for fmt in ALPHA_FORMATS:
        assert should_flatten(True, fmt) is False
    assert should_flatten(True, "jpeg") is True
    assert should_flatten(True, "tiff") is True
    assert should_flatten(False, "jpeg") is False


def test_resolve_background() -> None:
    assert resolve_background("#ff0000") == (255, 0, 0)
    assert resolve_background("navy") == (0, 0, 128)
    assert resolve_background("not-a-colour") == (255, 255, 255)
    assert resolve_background(None) == (255, 255, 255)


@pytest.mark.parametrize(
    ("preset", "expected"),
    [("tiny", 45), ("small", 60), ("balanced", 75), ("crisp", 88), ("ultra", 75), (None, 75)],
)
def test_preset_quality(preset, expected: int) -> None:
    quality = parse_quality(None, preset)
    assert isinstance(quality, Preset)
    assert quality.resolve() == expected


def test_explicit_quality_overrides_preset() -> None:
    quality = parse_quality("62", "tiny")
    assert quality == Explicit(62.0)
    assert quality.resolve() == 62


def test_explicit_quality_is_clamped_and_rounded() -> None:
    assert parse_quality("150").resolve() == 100
    assert parse_quality("-3").resolve() == 1
    assert parse_quality("72.5").resolve() == 73


def test_malformed_quality_uses_preset() -> None:
    assert parse_quality("abc", "small").resolve() == 60


def test_build_request_defaults() -> None:
    request = build_request({}, b"data", "photo.PNG")
    assert request.requested_format == "auto"
    assert request.source_extension == "png"
    assert request.resolved_format == "png"
    assert request.quality == 75
    assert request.target_bytes == 0
    assert request.resize is None
    assert request.keep_metadata is False
    assert request.flatten is False
    assert request.background == "#ffffff"
    assert request.effective_background is None


def test_build_request_parses_form_fields() -> None:
    request = build_request(
        {
            "format": "jpg",
            "preset": "crisp",
            "targetSizeKB": "50",
            "width": "800",
            "height": "",
            "fit": "cover",
            "keepMetadata": "true",
            "flatten": "1",
            "background": "#000000",
            "lossless": "false",
            "progressive": 1,
        },
        b"data",
        "photo.png",
    )
    assert request.resolved_format == "jpeg"
    assert request.quality == 88
    assert request.target_bytes == 50 * 1024
    assert request.resize == Resize(800, 0, "cover")
    assert request.keep_metadata is True
    assert request.lossless is False
    assert request.progressive is True
    assert request.effective_background == (0, 0, 0)


def test_build_request_tolerates_garbage() -> None:
    request = build_request(
        {"quality": "high", "targetSizeKB": "-5", "width": "wide", "fit": "stretch", "format": ""},
        b"data",
        "noext",
    )
    assert request.quality == 75
    assert request.target_bytes == 0
    assert request.resize is None
    assert request.resolved_format == "jpeg"


def test_unknown_fit_falls_back_to_inside() -> None:
    request = build_request({"width": 10, "fit": "stretch"}, b"", "a.png")
    assert request.resize == Resize(10, 0, "inside")


def test_flatten_ignored_for_alpha_output() -> None:
    request = EncodeRequest(source=b"", requested_format="png", flatten=True)
    assert request.effective_background is None


def test_resize_noop() -> None:
    assert Resize().is_noop
    assert not Resize(width=10).is_noop
