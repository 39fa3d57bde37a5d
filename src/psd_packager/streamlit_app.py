import asyncio
import json
import logging

import streamlit as st

from psd_packager.archive import ArchiveBuilder
from psd_packager.config import (
    API_BASE,
    DISCARD_STALE_RESPONSES,
    FONTS_TIMEOUT_SEC,
    LOG_LEVEL,
    SANITIZE_NAMES,
    UPLOAD_TIMEOUT_SEC,
)
from psd_packager.conversion import (
    ArchiveBuildError,
    ConversionController,
    ConversionState,
    ConversionStatus,
    Document,
)
from psd_packager.conversion.adapters import HttpConverter, HttpFontFetcher

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def describe_state(state: ConversionState) -> tuple[str, str]:
    """Return (severity, message) for the status box of the current state."""
    if state.status == ConversionStatus.SUBMITTING:
        return "info", "Processing..."
    if state.status == ConversionStatus.FAILED:
        return "error", f"Error: {state.error}"
    if state.is_ready:
        assert state.outcome is not None
        o = state.outcome
        return "success", (
            f"Converted {o.result.name}: {len(o.result.layers)} layers, "
            f"{len(o.images)} images, {len(o.fonts)} fonts"
        )
    return "info", "Upload a PSD file to see the JSON output"


def _controller() -> ConversionController:
    if "controller" not in st.session_state:
        st.session_state["controller"] = ConversionController(
            HttpConverter(API_BASE, timeout=UPLOAD_TIMEOUT_SEC),
            discard_stale_responses=DISCARD_STALE_RESPONSES,
        )
    return st.session_state["controller"]


def _builder() -> ArchiveBuilder:
    if "builder" not in st.session_state:
        st.session_state["builder"] = ArchiveBuilder(
            HttpFontFetcher(API_BASE, timeout=FONTS_TIMEOUT_SEC),
            sanitize_names=SANITIZE_NAMES,
        )
    return st.session_state["builder"]


def _reset_state() -> None:
    for key in ["archive", "build_error", "original_name", "submitted_id"]:
        if key in st.session_state:
            del st.session_state[key]
    _controller().reset()
    # Bump the uploader key to clear any previously uploaded file widget state
    st.session_state["upload_key"] = st.session_state.get("upload_key", 0) + 1


def main() -> None:
    st.set_page_config(page_title="PSD to JSON Converter", page_icon="🎨", layout="centered")
    st.title("🎨 PSD to JSON Converter")
    st.caption(f"API base: {API_BASE}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    if "upload_key" not in st.session_state:
        st.session_state["upload_key"] = 0
    uploaded = st.file_uploader(
        "Upload a PSD file",
        type=["psd"],
        key=f"uploader-{st.session_state['upload_key']}",
    )

    controller = _controller()

    # A new file widget id means a new upload; the previous archive is stale.
    if uploaded is not None and st.session_state.get("submitted_id") != uploaded.file_id:
        st.session_state["submitted_id"] = uploaded.file_id
        st.session_state["original_name"] = uploaded.name
        st.session_state.pop("archive", None)
        st.session_state.pop("build_error", None)
        document = Document(
            filename=uploaded.name,
            content=uploaded.getvalue(),
            content_type=uploaded.type or "application/octet-stream",
        )
        if document.content:
            with st.spinner("Processing..."):
                asyncio.run(controller.request_conversion(document))
        else:
            st.warning("The uploaded file is empty")

    state = controller.state
    severity, message = describe_state(state)
    getattr(st, severity)(message)

    if state.is_ready:
        assert state.outcome is not None
        if st.button("Build ZIP", type="primary"):
            with st.spinner("Preparing ZIP..."):
                try:
                    st.session_state["archive"] = asyncio.run(
                        _builder().package(state, st.session_state.get("original_name", ""))
                    )
                    st.session_state.pop("build_error", None)
                except ArchiveBuildError as e:
                    logger.error("Download error: %s", e)
                    st.session_state["build_error"] = str(e) or "Failed to create ZIP"

        archive = st.session_state.get("archive")
        if archive is not None:
            st.download_button(
                label=f"Download {archive.filename}",
                data=archive.content,
                file_name=archive.filename,
                mime="application/zip",
            )
            if archive.failures:
                with st.expander(f"{len(archive.failures)} asset(s) skipped"):
                    st.code("\n".join(archive.failures))

        with st.expander("JSON output", expanded=True):
            st.code(json.dumps(state.outcome.result.data, indent=2, ensure_ascii=False), language="json")

    if err := st.session_state.get("build_error"):
        st.error(f"Error: {err}")


if __name__ == "__main__":
    main()
