from __future__ import annotations
import io
import os, tempfile
import streamlit as st
from PIL import Image
from trufflify.config import EvolutionConfig
from trufflify.core import utils, runner
from trufflify.core.mutation import MutationEngine
from trufflify.visualization.display import render_buffer

st.set_page_config(page_title="Trufflify", page_icon="🍄", layout="wide")

st.title("Trufflify — paint any image into the truffle")

with st.sidebar:
    st.header("⚙️ Settings")
    frames = st.slider("Frames", 10, 1000, 200, step=10)
    iterations = st.slider("Mutations per frame", 50, 2000, 200, step=50)
    refresh_every = st.slider("Redraw every N frames", 1, 20, 2)
    seed = st.number_input("Random seed", value=42, step=1)
    run_button = st.button("🚀 Run Trufflify")

st.markdown("Upload two images below — your **input** and the **target**:")

col1, col2 = st.columns(2)
with col1:
    src_file = st.file_uploader("Input image", type=["jpg", "jpeg", "png"], key="src")
with col2:
    tgt_file = st.file_uploader("Target image", type=["jpg", "jpeg", "png"], key="tgt")

if run_button:
    if not src_file or not tgt_file:
        st.error("Please upload both images.")
        st.stop()

    cfg = EvolutionConfig(iterations_per_frame=iterations)

    with tempfile.TemporaryDirectory() as tmp:
        src_path = os.path.join(tmp, src_file.name)
        tgt_path = os.path.join(tmp, tgt_file.name)
        with open(src_path, "wb") as f:
            f.write(src_file.getbuffer())
        with open(tgt_path, "wb") as f:
            f.write(tgt_file.getbuffer())

        try:
            current, target = utils.load_pair(src_path, tgt_path)
        except utils.ImageLoadError as exc:
            st.error(str(exc))
            st.stop()

    engine = MutationEngine(target, current, seed=int(seed), config=cfg)

    st.write(f"Evolving a {target.width}x{target.height} image...")
    progress = st.progress(0)
    canvas = st.empty()
    log_placeholder = st.empty()

    def show_frame(view, idx):
        canvas.image(render_buffer(view, min_side=cfg.display_min_side, background=cfg.background))
        done = min(frames, (idx + 1) * refresh_every)
        progress.progress(done / frames)
        log_placeholder.text(f"Frame {done}/{frames} • kept {engine.accepted}/{engine.trials} mutations")

    stats = runner.run_evolution(
        engine,
        frames,
        frame_callback=show_frame,
        frame_interval=refresh_every,
        verbose=False,
    )

    st.success("✅ Done! Trufflify completed successfully.")
    st.markdown(
        f"**Kept mutations:** {stats['accepted']} / {stats['trials']} • "
        f"**Error:** {stats['initial_error']} → {stats['final_error']} • "
        f"**Mean ΔE2000:** {engine.perceptual_error():.2f} • "
        f"**Time:** {stats['duration_s']:.2f}s"
    )

    png = io.BytesIO()
    Image.fromarray(engine.snapshot()).save(png, format="PNG")
    st.download_button("⬇️ Download PNG", data=png.getvalue(), file_name=cfg.output_name)
