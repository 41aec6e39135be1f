import io
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

from PIL import Image

from optipic.pipeline import Pipeline, has_alpha

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "avif": "image/avif",
    "tiff": "image/tiff",
    "gif": "image/gif",
}

# Formats whose Pillow writers accept the metadata blobs kept by the pipeline.
EXIF_FORMATS = frozenset({"jpeg", "png", "webp", "avif", "tiff"})
ICC_FORMATS = frozenset({"jpeg", "png", "webp", "avif", "tiff"})

WEBP_METHOD = 5
AVIF_SPEED = 5
PNG_COMPRESS_LEVEL = 9


@dataclass(frozen=True)
class EncodeOptions:
    lossless: bool = False
    progressive: bool = False


@dataclass(frozen=True)
class EncodedResult:
    data: bytes
    format: str
    quality: int

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.format]


# ---------- Mode coercion ----------
def _rgb_or_rgba(img: Image.Image) -> Image.Image:
    if has_alpha(img):
        return img if img.mode == "RGBA" else img.convert("RGBA")
    return img if img.mode == "RGB" else img.convert("RGB")


def png_colors(quality: int) -> int:
    return max(2, min(256, int(quality * 2.56 + 0.5)))


# ---------- Per-format save arguments ----------
SaveArgs = Tuple[Image.Image, Dict[str, Any]]


def _jpeg(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    if img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert("RGB")
    return img, {"quality": quality, "optimize": True, "progressive": options.progressive}


def _png(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    img = _rgb_or_rgba(img)
    method = Image.Quantize.FASTOCTREE if img.mode == "RGBA" else Image.Quantize.MEDIANCUT
    img = img.quantize(colors=png_colors(quality), method=method)
    return img, {"optimize": True, "compress_level": PNG_COMPRESS_LEVEL}


def _webp(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    return _rgb_or_rgba(img), {"quality": quality, "method": WEBP_METHOD, "lossless": options.lossless}


def _avif(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    return _rgb_or_rgba(img), {"quality": quality, "speed": AVIF_SPEED}


def _tiff(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    # LZW is lossless, quality has nothing to drive here.
    return img, {"compression": "tiff_lzw"}


def _gif(img: Image.Image, quality: int, options: EncodeOptions) -> SaveArgs:
    # RGBA lets the writer keep a transparency index (LA would collapse to L).
    return _rgb_or_rgba(img), {"optimize": True, "save_all": False}


ENCODERS: Dict[str, Callable[[Image.Image, int, EncodeOptions], SaveArgs]] = {
    "jpeg": _jpeg,
    "png": _png,
    "webp": _webp,
    "avif": _avif,
    "tiff": _tiff,
    "gif": _gif,
}


def encode_with_quality(
    pipeline: Pipeline,
    fmt: str,
    quality: int,
    options: EncodeOptions = EncodeOptions(),
) -> EncodedResult:
    if fmt not in ENCODERS:
        fmt = "jpeg"
    img, params = ENCODERS[fmt](pipeline.image, quality, options)
    if pipeline.exif and fmt in EXIF_FORMATS:
        params["exif"] = pipeline.exif
    if pipeline.icc_profile and fmt in ICC_FORMATS:
        params["icc_profile"] = pipeline.icc_profile

    buf = io.BytesIO()
    img.save(buf, format=fmt.upper(), **params)
    data = buf.getvalue()
    logger.debug("encoded %s at quality %s: %d bytes", fmt, quality, len(data))
    return EncodedResult(data=data, format=fmt, quality=quality)
