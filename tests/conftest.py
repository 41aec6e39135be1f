from __future__ import annotations

import io
from typing import Callable

import pytest
from PIL import Image

from optipic import encoder
from optipic.encoder import EncodedResult, EncodeOptions


def to_bytes(img: Image.Image, fmt: str = "PNG", **params) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


def decode(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def noisy_image() -> Callable[..., Image.Image]:
    def make(width: int = 320, height: int = 240, mode: str = "RGB") -> Image.Image:
        noise = Image.effect_noise((width, height), 48)
        gradient = Image.linear_gradient("L").resize((width, height))
        base = Image.merge("RGB", (noise, gradient, Image.blend(noise, gradient, 0.5)))
        return base.convert(mode)

    return make


@pytest.fixture
def png_bytes(noisy_image) -> Callable[..., bytes]:
    def make(width: int = 320, height: int = 240, mode: str = "RGB") -> bytes:
        return to_bytes(noisy_image(width, height, mode), "PNG")

    return make


@pytest.fixture
def encode_calls(monkeypatch) -> list[EncodedResult]:
    """Record every single-pass encode made through the encoder module."""
    calls: list[EncodedResult] = []
    real = encoder.encode_with_quality

    def spy(pipeline, fmt, quality, options=EncodeOptions()):
        result = real(pipeline, fmt, quality, options)
        calls.append(result)
        return result

    monkeypatch.setattr(encoder, "encode_with_quality", spy)
    return calls
