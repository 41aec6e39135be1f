import logging
import os

import streamlit as st

logging.basicConfig(
    level=os.environ.get("OPTIPIC_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(page_title="optipic", page_icon="🖼️", layout="centered")

st.title("🖼️ optipic")
st.caption("Convert and compress images to JPEG, PNG, WebP, AVIF, TIFF or GIF.")

st.markdown(
    "- **Image Converter**: pick a format, preset or quality, resize and download.\n"
    "- **Size Estimate**: see how large the converted files will be first.\n"
    "- Set a **target size** to search for the quality that lands closest to it."
)
st.info("Choose a tool from the sidebar to start.")
