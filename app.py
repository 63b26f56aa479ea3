import logging

import streamlit as st

from family_tree.auth import init_auth, is_authenticated, login, logout
from family_tree.config import DEFAULT_RANKDIR, RANKDIR_OPTIONS, load_config
from family_tree.diagram import build_diagram
from family_tree.export import RenderError, members_csv, members_pdf, render_remote
from family_tree.records import RecordSourceError, load_records
from family_tree.tree_builder import CyclicStructureError, build, count_nodes
from family_tree.validation import validate_records
from family_tree.visibility import VisibilityController

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("family_tree.app")

cfg = load_config(st.secrets)
st.set_page_config(page_title=cfg.title, layout="wide")

# --------------------------
# Session State
# --------------------------
def _init_state():
    init_auth(st.session_state)
    if "rankdir" not in st.session_state: st.session_state.rankdir = DEFAULT_RANKDIR
    if "show_details" not in st.session_state: st.session_state.show_details = True

_init_state()

# --------------------------
# Password Gate
# --------------------------
if not is_authenticated(st.session_state):
    st.title(cfg.title)
    st.caption("Please enter the password to access the family tree")
    with st.form("login_form", clear_on_submit=True):
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Access Family Tree"):
            if login(st.session_state, password, cfg.password):
                st.rerun()
            else:
                st.error("Incorrect password. Please try again.")
    st.stop()

# --------------------------
# Load → Build → Initialize
# --------------------------
def load_tree():
    """Run a full load from scratch; any failure replaces the tree with an error."""
    for key in ("records", "root", "expanded", "warnings", "load_error"):
        st.session_state.pop(key, None)
    try:
        records = load_records(cfg)
        root = build(records)
        controller = VisibilityController(root)
    except (RecordSourceError, CyclicStructureError) as e:
        logger.error("Loading family tree failed: %s", e)
        st.session_state.load_error = str(e)
        return
    st.session_state.records = records
    st.session_state.root = root
    st.session_state.expanded = controller.expanded
    st.session_state.warnings = validate_records(records)

if "root" not in st.session_state and "load_error" not in st.session_state:
    with st.spinner("Loading family tree..."):
        load_tree()

# --------------------------
# Sidebar Controls
# --------------------------
with st.sidebar:
    st.header("Settings")
    labels = list(RANKDIR_OPTIONS)
    current = [k for k, v in RANKDIR_OPTIONS.items() if v == st.session_state.rankdir]
    direction = st.selectbox("Layout Direction", labels,
                             index=labels.index(current[0]) if current else 0)
    st.session_state.rankdir = RANKDIR_OPTIONS[direction]
    st.checkbox("Show member details", key="show_details")

    if st.button("🔄 Refresh"):
        load_tree()
        st.rerun()
    if st.button("Log out"):
        logout(st.session_state)
        st.rerun()

if st.session_state.get("load_error"):
    st.error(f"Error fetching family tree: {st.session_state.load_error}")
    st.stop()

root = st.session_state.root
controller = VisibilityController(root, st.session_state.expanded)

st.title(cfg.title)
st.caption(f"{count_nodes(root)} members")

if st.session_state.warnings:
    with st.expander(f"⚠️ {len(st.session_state.warnings)} data issue(s)", expanded=False):
        for w in st.session_state.warnings:
            st.warning(w)

# --------------------------
# Diagram
# --------------------------
graph = build_diagram(root, controller.expanded, rankdir=st.session_state.rankdir,
                      show_details=st.session_state.show_details)
st.graphviz_chart(graph, use_container_width=True)

# --------------------------
# Expand / Collapse
# --------------------------
st.subheader("Expand / Collapse")
if st.button("Expand all"):
    st.session_state.expanded = controller.expand_all()
    st.rerun()

branches = [n for n in controller.visible_nodes() if n.children]
cols = st.columns(4)
for i, node in enumerate(branches):
    icon = "➖" if controller.is_expanded(node) else "➕"
    if cols[i % 4].button(f"{icon} {node.name}", key=f"toggle_{i}_{node.member_id}"):
        st.session_state.expanded = controller.toggle(node)
        st.rerun()

# --------------------------
# Export
# --------------------------
st.subheader("📤 Export")
ec1, ec2, ec3, ec4 = st.columns(4)
with ec1:
    st.download_button("Members CSV", members_csv(st.session_state.records),
                       file_name="family_members.csv", mime="text/csv")
with ec2:
    st.download_button("Diagram DOT", graph.source, file_name="family_tree.dot",
                       mime="text/vnd.graphviz")
with ec3:
    if st.button("Member Report PDF"):
        st.download_button("Download PDF Report", members_pdf(root, cfg.title),
                           file_name="family_tree_report.pdf", mime="application/pdf")
with ec4:
    for fmt, mime in (("png", "image/png"), ("pdf", "application/pdf")):
        if st.button(f"Export {fmt.upper()}"):
            try:
                data = render_remote(graph.source, fmt, cfg.graphviz_api_url,
                                     timeout=cfg.request_timeout)
            except RenderError as e:
                st.error(str(e))
            else:
                st.download_button(f"Download {fmt.upper()}", data=data,
                                   file_name=f"family_tree.{fmt}", mime=mime)
