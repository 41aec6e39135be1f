# optipic size estimate page
import streamlit as st

from optipic.batch import BatchJob, run_batch, summarize
from optipic.ui import UPLOAD_TYPES, batch_settings, sidebar_form
from optipic.utils import format_bytes, format_percent

st.set_page_config(page_title="Size Estimate", page_icon="📏", layout="wide")

st.title("📏 Size Estimate")
st.caption("Preview output sizes for the current settings before downloading anything.")

form = sidebar_form()

uploaded = st.file_uploader("Upload image(s)", type=UPLOAD_TYPES, accept_multiple_files=True)

if uploaded:
    jobs = [BatchJob(filename=f.name, data=f.getvalue()) for f in uploaded]
    with st.spinner("Estimating..."):
        results = run_batch(jobs, form, **batch_settings())

    rows = []
    for r in results:
        if not r.ok:
            st.error(f"❌ {r.input_name}: {r.error}")
            continue
        rows.append(
            {
                "Input": r.input_name,
                "Output": r.name,
                "Input size": format_bytes(r.input_size),
                "Output size": format_bytes(r.output_size),
            }
        )

    if rows:
        st.dataframe(rows, use_container_width=True, hide_index=True)

        summary = summarize(results)
        col1, col2, col3 = st.columns(3)
        col1.metric("Original", format_bytes(summary.input_size))
        col2.metric("Estimated", format_bytes(summary.output_size))
        col3.metric("Saved", format_percent(summary.savings_percent))
        st.progress(min(1.0, summary.ratio))
else:
    st.info("Upload images to estimate their converted size.")
