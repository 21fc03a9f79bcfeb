import logging

import streamlit as st

from chamber_monitor.config_loader import load_config
from chamber_monitor.integrations.report_export import write_report_files
from chamber_monitor.logging_setup import setup_logging
from chamber_monitor.providers import get_store
from chamber_monitor.state import AppState
from chamber_monitor.ui import (
    SEARCH_FIELDS,
    add_job_dialog,
    confirm_complete_dialog,
    downtime_dialog,
    render_machine_grid,
    render_search_results,
    report_dialog,
)

log = logging.getLogger("app")


# ============================
# Bootstrap (once per session)
# ============================
st.set_page_config(page_title="Chamber Monitor", layout="wide")

if "cfg" not in st.session_state:
    try:
        cfg = load_config()
    except FileNotFoundError as e:
        st.error(str(e))
        st.stop()
    setup_logging((cfg.get("logging", {}) or {}).get("level", "INFO"))
    st.session_state.cfg = cfg

cfg = st.session_state.cfg

if "app_state" not in st.session_state:
    try:
        store = get_store(cfg)
    except Exception as e:
        # the board still works without a store; completions are just not saved
        log.error("store unavailable: %s", e)
        st.session_state.store_error = str(e)
        store = None
    st.session_state.app_state = AppState.from_config(cfg, store)

# init storages
for key, default in {
    "tickers": {},
    "dialog": None,
    "report_to_show": None,
    "persist_error": None,
    "search_result": None,
    "search_value": "",
    "store_error": None,
}.items():
    if key not in st.session_state:
        st.session_state[key] = default

state: AppState = st.session_state.app_state
timer_interval_s = float((cfg.get("ui", {}) or {}).get("timer_interval_s", 1))

# ============================
# Header
# ============================
st.title("Chamber Monitor")
if st.session_state.store_error:
    st.warning(f"Report store not connected: {st.session_state.store_error}")

# ============================
# Machines
# ============================
render_machine_grid(state, state.machines, per_row=4, interval_s=timer_interval_s)

# ============================
# Pending dialog
# ============================
pending = st.session_state.pop("dialog", None)
if pending:
    kind, machine_id, job_id = pending
    if kind == "add_job":
        add_job_dialog(state, machine_id)
    elif kind == "downtime":
        downtime_dialog(state, machine_id)
    elif kind == "complete":
        confirm_complete_dialog(state, machine_id, job_id)

# ============================
# Completion report
# ============================
report = st.session_state.report_to_show
if report is not None:
    if st.session_state.persist_error:
        st.warning(f"Report generated, but saving failed: {st.session_state.persist_error}")
        st.session_state.persist_error = None

    if (cfg.get("export", {}) or {}).get("outbox_dir"):
        try:
            write_report_files(report, cfg)
        except OSError as e:
            st.warning(f"Report export failed: {e}")

    st.session_state.report_to_show = None
    report_dialog(report)

# ============================
# Search
# ============================
st.divider()
st.subheader("Search Completed Jobs")

with st.form("search_form"):
    c1, c2, c3 = st.columns([1, 2, 1])
    field = c1.selectbox("Search by", list(SEARCH_FIELDS), format_func=SEARCH_FIELDS.get)
    value = c2.text_input("Value", placeholder="Enter search term...")
    submitted = c3.form_submit_button("Search", use_container_width=True)

if submitted:
    with st.spinner("Searching..."):
        st.session_state.search_result = state.search(field, value)
    st.session_state.search_value = value

if st.session_state.search_result is not None:
    chosen = render_search_results(st.session_state.search_result, st.session_state.search_value)
    if chosen is not None:
        report_dialog(chosen)
