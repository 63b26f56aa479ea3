"""Downloads: member CSV, DOT source, PDF member report and remote PNG/PDF rendering."""

from __future__ import annotations

import html
import logging
from io import BytesIO
from typing import Sequence

import requests
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from .records import MemberRecord, records_frame
from .tree_builder import ATTRIBUTE_FIELDS, TreeNode, walk_with_depth

logger = logging.getLogger(__name__)

RENDER_FORMATS = ("png", "pdf", "svg")


class RenderError(RuntimeError):
    """The remote Graphviz renderer failed or is not configured."""


def members_csv(records: Sequence[MemberRecord]) -> bytes:
    return records_frame(records).to_csv(index=False).encode("utf-8")


def members_pdf(root: TreeNode, title: str = "Family Tree") -> bytes:
    """Render the tree as an indented member list, one paragraph per member."""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=title)
    styles = getSampleStyleSheet()
    story = [Paragraph(html.escape(title), styles["Title"]), Spacer(1, 12)]

    for node, depth in walk_with_depth(root):
        parts = [f"<b>{html.escape(node.name)}</b>"]
        for fld in ATTRIBUTE_FIELDS:
            value = node.attributes.get(fld)
            if value:
                parts.append(html.escape(value))
        if node.spouse is not None:
            parts.append(f"spouse: {html.escape(node.spouse.name)}")
        style = styles["Normal"].clone(f"depth{depth}", leftIndent=18 * depth)
        story.append(Paragraph(" · ".join(parts), style))
        story.append(Spacer(1, 4))

    doc.build(story)
    return buf.getvalue()


def render_remote(dot_source: str, fmt: str, api_url: str, timeout: float = 60, session=None) -> bytes:
    """POST the DOT source to a Graphviz HTTP renderer and return the image bytes."""
    if fmt not in RENDER_FORMATS:
        raise ValueError(f"Unsupported format {fmt!r}; expected one of {RENDER_FORMATS}")
    base = (api_url or "").strip()
    if not base:
        raise RenderError("No Graphviz API URL set. Export DOT and render elsewhere.")

    url = base.rstrip("/") + "/render"
    http = session if session is not None else requests
    try:
        resp = http.post(url, json={"dot": dot_source, "format": fmt}, timeout=timeout)
    except requests.RequestException as e:
        raise RenderError(f"Remote render error: {e}") from e
    if resp.status_code != 200:
        raise RenderError(f"Remote render failed: HTTP {resp.status_code} - {resp.text[:200]}")

    logger.info("Rendered %s via %s (%d bytes)", fmt, url, len(resp.content))
    return resp.content
