# optipic converter page
import streamlit as st

from optipic.batch import ARCHIVE_NAME, BatchJob, build_zip, run_batch
from optipic.ui import UPLOAD_TYPES, batch_settings, preview_png, sidebar_form
from optipic.utils import format_bytes

st.set_page_config(page_title="Image Converter", page_icon="🗜️", layout="wide")

st.title("🗜️ Image Converter")
st.caption("Convert, resize and compress images, optionally to a target file size.")

form = sidebar_form()

uploaded = st.file_uploader("Upload image(s)", type=UPLOAD_TYPES, accept_multiple_files=True)

if uploaded:
    jobs = [BatchJob(filename=f.name, data=f.getvalue()) for f in uploaded]
    with st.spinner(f"Converting {len(jobs)} image(s)..."):
        results = run_batch(jobs, form, **batch_settings())

    for r in results:
        if not r.ok:
            st.error(f"❌ {r.input_name}: {r.error}")

    done = [r for r in results if r.ok]
    if len(jobs) == 1 and done:
        r = done[0]
        col1, col2 = st.columns(2)
        with col1:
            st.subheader("Original")
            # Browsers cannot display every format (TIFF, AVIF); show PNG copies.
            st.image(preview_png(jobs[0].data), use_container_width=True)
            st.write(f"Size: {format_bytes(r.input_size)}")
        with col2:
            st.subheader("Converted")
            st.image(preview_png(r.data), use_container_width=True)
            st.write(f"Size: {format_bytes(r.output_size)}")

        st.download_button(
            "⬇️ Download Converted Image",
            data=r.data,
            file_name=r.name,
            mime=r.mime_type,
        )
    elif done:
        st.subheader("Converted")
        for r in done:
            st.write(f"**{r.name}**: {format_bytes(r.input_size)} → {format_bytes(r.output_size)}")

        st.download_button(
            "⬇️ Download All (ZIP)",
            data=build_zip(done),
            file_name=ARCHIVE_NAME,
            mime="application/zip",
        )
else:
    st.info("Upload one or more images to begin.")
