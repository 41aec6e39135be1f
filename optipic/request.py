from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from PIL import ImageColor

from optipic.utils import get_extension, safe_number, to_boolean

FORMATS = ("jpeg", "png", "webp", "avif", "tiff", "gif")
DEFAULT_FORMAT = "jpeg"

# Output formats that can carry transparency; flatten is skipped for these.
ALPHA_FORMATS = frozenset({"png", "webp", "avif", "gif"})

EXTENSION_FORMATS = {
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "png": "png",
    "webp": "webp",
    "avif": "avif",
    "tiff": "tiff",
    "gif": "gif",
}

PRESET_QUALITY = {
    "tiny": 45,
    "small": 60,
    "balanced": 75,
    "crisp": 88,
}
DEFAULT_PRESET = "balanced"

FIT_MODES = ("inside", "cover", "contain")
DEFAULT_BACKGROUND = "#ffffff"

RGB = Tuple[int, int, int]


# ---------- Format ----------
def resolve_format(requested: Optional[str], source_extension: Optional[str] = "") -> str:
    requested = (requested or "auto").lower()
    if requested == "auto":
        return EXTENSION_FORMATS.get((source_extension or "").lower(), DEFAULT_FORMAT)
    return EXTENSION_FORMATS.get(requested, DEFAULT_FORMAT)


def should_flatten(flatten: bool, fmt: str) -> bool:
    return flatten and fmt not in ALPHA_FORMATS


def resolve_background(value: Any) -> RGB:
    """Parse a CSS-style colour, falling back to opaque white."""
    if isinstance(value, str) and value.strip():
        try:
            return ImageColor.getrgb(value.strip())[:3]
        except ValueError:
            pass
    return ImageColor.getrgb(DEFAULT_BACKGROUND)[:3]


# ---------- Quality ----------
@dataclass(frozen=True)
class Preset:
    name: str

    def resolve(self) -> int:
        return PRESET_QUALITY.get(self.name, PRESET_QUALITY[DEFAULT_PRESET])


@dataclass(frozen=True)
class Explicit:
    value: float

    def resolve(self) -> int:
        return max(1, min(100, int(self.value + 0.5)))


Quality = Union[Preset, Explicit]


def parse_quality(raw_quality: Any, preset: Any = None) -> Quality:
    preset_name = preset if isinstance(preset, str) and preset else DEFAULT_PRESET
    value = safe_number(raw_quality, None)
    if value is None:
        return Preset(preset_name)
    return Explicit(value)


# ---------- Request ----------
@dataclass(frozen=True)
class Resize:
    width: int = 0
    height: int = 0
    fit: str = "inside"

    @property
    def is_noop(self) -> bool:
        return self.width <= 0 and self.height <= 0


@dataclass(frozen=True)
class EncodeRequest:
    source: bytes
    requested_format: str = "auto"
    source_extension: str = ""
    quality: int = PRESET_QUALITY[DEFAULT_PRESET]
    target_bytes: int = 0
    resize: Optional[Resize] = None
    keep_metadata: bool = False
    lossless: bool = False
    progressive: bool = False
    flatten: bool = False
    background: str = DEFAULT_BACKGROUND

    @property
    def resolved_format(self) -> str:
        return resolve_format(self.requested_format, self.source_extension)

    @property
    def effective_background(self) -> Optional[RGB]:
        if not should_flatten(self.flatten, self.resolved_format):
            return None
        return resolve_background(self.background)


def build_request(form: Mapping[str, Any], source: bytes, filename: str = "") -> EncodeRequest:
    """Turn raw form fields (strings, numbers or booleans) into an EncodeRequest.

    Malformed values never raise; each field falls back to its default.
    """
    quality = parse_quality(form.get("quality"), form.get("preset")).resolve()
    target_kb = safe_number(form.get("targetSizeKB"), 0)
    width = int(max(0.0, safe_number(form.get("width"), 0)))
    height = int(max(0.0, safe_number(form.get("height"), 0)))
    fit = form.get("fit")
    if fit not in FIT_MODES:
        fit = "inside"
    background = form.get("background")
    if not isinstance(background, str) or not background:
        background = DEFAULT_BACKGROUND
    requested = form.get("format")
    if not isinstance(requested, str) or not requested:
        requested = "auto"

    return EncodeRequest(
        source=source,
        requested_format=requested,
        source_extension=get_extension(filename),
        quality=quality,
        target_bytes=int(target_kb * 1024) if target_kb > 0 else 0,
        resize=Resize(width, height, fit) if width or height else None,
        keep_metadata=to_boolean(form.get("keepMetadata")),
        lossless=to_boolean(form.get("lossless")),
        progressive=to_boolean(form.get("progressive")),
        flatten=to_boolean(form.get("flatten")),
        background=background,
    )
