# Streamlit widgets shared by the pages.
import io
import os
from typing import Any, Dict, Optional

import streamlit as st
from PIL import Image

from optipic.pipeline import has_alpha
from optipic.request import FIT_MODES, FORMATS, PRESET_QUALITY
from optipic.utils import safe_number

UPLOAD_TYPES = ["png", "jpg", "jpeg", "webp", "avif", "tif", "tiff", "gif", "bmp"]


def preview_png(data: bytes) -> bytes:
    """Re-encode any decodable image as PNG so browsers can display it."""
    with Image.open(io.BytesIO(data)) as img:
        img = img.convert("RGBA" if has_alpha(img) else "RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def batch_settings() -> Dict[str, Optional[float]]:
    workers = safe_number(os.environ.get("OPTIPIC_MAX_WORKERS"), 0)
    timeout = safe_number(os.environ.get("OPTIPIC_TIMEOUT"), 0)
    return {
        "max_workers": int(workers) if workers > 0 else None,
        "timeout": timeout if timeout > 0 else None,
    }


def sidebar_form() -> Dict[str, Any]:
    """Render the conversion controls and return them as form fields."""
    form: Dict[str, Any] = {}
    with st.sidebar:
        st.subheader("Output")
        form["format"] = st.selectbox("Output format", ["auto", *FORMATS])

        preset = st.radio("Preset", [*PRESET_QUALITY, "custom"], index=2, horizontal=True)
        if preset == "custom":
            form["preset"] = "balanced"
            form["quality"] = st.slider("Quality (lower = smaller size)", 1, 100, 75)
        else:
            form["preset"] = preset

        target_kb = st.number_input("Target size (KB, 0 = off)", min_value=0, value=0, step=10)
        if target_kb:
            form["targetSizeKB"] = target_kb

        st.subheader("Resize")
        if st.checkbox("Resize image(s)", False):
            form["width"] = st.number_input("Width (px, 0 = auto)", min_value=0, value=1600)
            form["height"] = st.number_input("Height (px, 0 = auto)", min_value=0, value=0)
            form["fit"] = st.selectbox("Fit", list(FIT_MODES))

        st.subheader("Other")
        form["keepMetadata"] = st.checkbox("Keep metadata (EXIF/ICC)", False)
        form["progressive"] = st.checkbox("Progressive JPEG", False)
        form["lossless"] = st.checkbox("Lossless WebP", False)
        form["flatten"] = st.checkbox("Flatten transparency", False)
        form["background"] = st.color_picker("Background", "#ffffff")
    return form
