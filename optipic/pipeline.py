import io
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from PIL import Image, ImageOps

from optipic.request import RGB, Resize

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class TransformSpec:
    resize: Optional[Resize] = None
    keep_metadata: bool = False
    # Only set when flattening is effective for the output format.
    background: Optional[RGB] = None


@dataclass
class Pipeline:
    """Decoded, oriented and transformed image ready to be encoded."""

    image: Image.Image
    source_size: Tuple[int, int]
    stages: Tuple[str, ...] = ()
    exif: Optional[bytes] = None
    icc_profile: Optional[bytes] = field(default=None, repr=False)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


# ---------- Helpers ----------
def has_alpha(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    return img.mode == "P" and "transparency" in img.info


def _scale(size: Tuple[int, int], factor: float) -> Tuple[int, int]:
    return (max(1, int(size[0] * factor + 0.5)), max(1, int(size[1] * factor + 0.5)))


def _padding_ready(img: Image.Image, background: RGB):
    if has_alpha(img):
        return img.convert("RGBA"), TRANSPARENT
    return img.convert("RGB"), background


# ---------- Stages ----------
def resize_image(img: Image.Image, resize: Resize, background: RGB = (255, 255, 255)) -> Image.Image:
    """Resize with the requested fit mode; never scales above the source size."""
    src_w, src_h = img.size
    width, height = resize.width, resize.height

    if not width or not height:
        # A single side keeps the aspect ratio whatever the fit mode.
        factor = width / src_w if width else height / src_h
        if factor >= 1:
            return img
        return img.resize(_scale(img.size, factor), Image.Resampling.LANCZOS)

    if resize.fit == "cover":
        box = (min(width, src_w), min(height, src_h))
        if box == img.size:
            return img
        return ImageOps.fit(img, box, method=Image.Resampling.LANCZOS)

    factor = min(width / src_w, height / src_h)
    if factor >= 1:
        return img
    if resize.fit == "contain":
        canvas = (min(width, src_w), min(height, src_h))
        padded, color = _padding_ready(img, background)
        return ImageOps.pad(padded, canvas, method=Image.Resampling.LANCZOS, color=color)
    return img.resize(_scale(img.size, factor), Image.Resampling.LANCZOS)


def flatten_image(img: Image.Image, background: RGB) -> Image.Image:
    if not has_alpha(img):
        return img if img.mode == "RGB" else img.convert("RGB")
    rgba = img.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, mask=rgba.getchannel("A"))
    return canvas


def build_pipeline(source: bytes, spec: TransformSpec) -> Pipeline:
    with Image.open(io.BytesIO(source)) as opened:
        icc_profile = opened.info.get("icc_profile")
        # Returns a loaded copy of the first frame with orientation applied.
        image = ImageOps.exif_transpose(opened)
    source_size = image.size
    stages = ["orient"]
    # Read before resizing: padding builds a fresh canvas without info.
    exif_data = image.getexif()

    if spec.resize is not None and not spec.resize.is_noop:
        image = resize_image(image, spec.resize, spec.background or (255, 255, 255))
        stages.append("resize")

    exif = None
    if spec.keep_metadata:
        exif = exif_data.tobytes() if len(exif_data) else None
        stages.append("metadata")
    else:
        icc_profile = None

    if spec.background is not None:
        image = flatten_image(image, spec.background)
        stages.append("flatten")

    logger.debug("pipeline %s: %sx%s -> %sx%s", "/".join(stages), *source_size, *image.size)
    return Pipeline(
        image=image,
        source_size=source_size,
        stages=tuple(stages),
        exif=exif,
        icc_profile=icc_profile,
    )
