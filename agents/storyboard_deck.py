"""
Storyboard Deck Builder

Renders an approved shot list as a PPTX storyboard: a title slide, then one
slide per shot with the frame (sketch image or caption) on the left and the
shot details on the right.
"""

import base64
import io
import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.util import Inches, Pt

logger = logging.getLogger(__name__)

PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# Slide sizes in inches
WIDE_LAYOUT = (13.33, 7.5)
A4_LAYOUT = (10.83, 7.5)

COLORS = {
    "bg": "0B0B0B",
    "panel": "141414",
    "text": "FFFFFF",
    "muted": "B5B5B5",
    "stroke": "2A2A2A",
}
FONT = "Inter"

MARGIN = 0.6
GAP = 0.2
DETAILS_W = 4.03
PANEL_TOP = 0.9
PANEL_H = 6.1

MAX_IMAGE_PX = 1600
REMOTE_IMAGE_SCHEMES = ("http", "https")


def safe_text(value: Any, fallback: str) -> str:
    text = str(value if value is not None else "").strip()
    return text or fallback


def safe_filename_base(title: Any) -> str:
    base = str(title or "Storyboard").strip()
    base = re.sub(r"[^\w\-]+", "_", base, flags=re.ASCII)
    base = re.sub(r"_+", "_", base).strip("_")
    return base or "Storyboard"


def storyboard_filename(metadata: Dict[str, Any]) -> str:
    return f"{safe_filename_base(metadata.get('project_title') or 'Storyboard')}_Storyboard.pptx"


def _layout_for_aspect(aspect_ratio: Optional[str]) -> Tuple[float, float]:
    return A4_LAYOUT if aspect_ratio == "9:16" else WIDE_LAYOUT


# ============================================
# DRAWING HELPERS
# ============================================

def _rgb(key: str) -> RGBColor:
    return RGBColor.from_string(COLORS[key])


def _fill_background(slide) -> None:
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = _rgb("bg")


def _add_panel(slide, x: float, y: float, w: float, h: float):
    shape = slide.shapes.add_shape(
        MSO_SHAPE.ROUNDED_RECTANGLE, Inches(x), Inches(y), Inches(w), Inches(h)
    )
    shape.fill.solid()
    shape.fill.fore_color.rgb = _rgb("panel")
    shape.line.color.rgb = _rgb("stroke")
    return shape


def _add_text(
    slide,
    text: str,
    x: float,
    y: float,
    w: float,
    h: float,
    size: int,
    color: str = "text",
    bold: bool = False,
    align: Optional[PP_ALIGN] = None,
):
    """Text box; each line of ``text`` becomes its own paragraph."""
    box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
    frame = box.text_frame
    frame.word_wrap = True
    frame.vertical_anchor = MSO_ANCHOR.TOP

    for i, line in enumerate(text.split("\n")):
        paragraph = frame.paragraphs[0] if i == 0 else frame.add_paragraph()
        if align is not None:
            paragraph.alignment = align
        run = paragraph.add_run()
        run.text = line
        run.font.name = FONT
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.color.rgb = _rgb(color)
    return box


# ============================================
# SKETCH IMAGES
# ============================================

def load_sketch_image(url: Optional[str]) -> Optional[Tuple[io.BytesIO, int, int]]:
    """
    Fetch a sketch (http(s) or data: URL) and normalize it to PNG.

    Returns (png stream, width px, height px), or None when the image
    cannot be used; the slide then shows the caption instead.
    """
    if not url:
        return None
    try:
        if url.startswith("data:"):
            raw = base64.b64decode(url.split(",", 1)[1])
        elif urlparse(url).scheme.lower() not in REMOTE_IMAGE_SCHEMES:
            logger.warning(f"[storyboard_deck] unsupported sketch URL scheme: {url[:60]}")
            return None
        else:
            response = requests.get(url, timeout=60)
            response.raise_for_status()
            raw = response.content

        with Image.open(io.BytesIO(raw)) as img:
            frame = img.convert("RGB")
        frame.thumbnail((MAX_IMAGE_PX, MAX_IMAGE_PX))

        stream = io.BytesIO()
        frame.save(stream, format="PNG")
        stream.seek(0)
        return stream, frame.width, frame.height
    except (
        requests.exceptions.RequestException,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        IndexError,
    ) as e:
        logger.warning(f"[storyboard_deck] sketch image unavailable ({url[:60]}): {e}")
        return None


def _fit(img_w: int, img_h: int, box_w: float, box_h: float) -> Tuple[float, float, float, float]:
    """Largest centered rectangle with the image's aspect inside the box."""
    scale = min(box_w / img_w, box_h / img_h)
    w, h = img_w * scale, img_h * scale
    return (box_w - w) / 2, (box_h - h) / 2, w, h


# ============================================
# SLIDES
# ============================================

def _title_slide(prs, metadata: Dict[str, Any], width: float) -> None:
    slide = prs.slides.add_slide(prs.slide_layouts[6])
    _fill_background(slide)

    project_title = safe_text(metadata.get("project_title"), "Untitled")
    _add_text(slide, project_title, 0.8, 1.2, width - 1.6, 0.8, 34, bold=True)

    parts = [
        safe_text(metadata.get("brand"), ""),
        f"Director: {metadata['director']}" if safe_text(metadata.get("director"), "") else "",
        f"DoP: {metadata['dop']}" if safe_text(metadata.get("dop"), "") else "",
        f"AR: {metadata['aspect_ratio']}" if safe_text(metadata.get("aspect_ratio"), "") else "",
    ]
    subtitle = "  •  ".join(p for p in parts if p)
    _add_text(slide, subtitle or "Generated storyboard", 0.8, 2.05, width - 1.6, 0.5, 14, color="muted")

    note = safe_text(metadata.get("notes"), "")
    if note:
        _add_panel(slide, 0.8, 2.8, width - 1.6, 1.1)
        _add_text(slide, note, 1.05, 2.95, width - 2.1, 0.8, 12)


def shot_detail_lines(shot: Dict[str, Any]) -> List[str]:
    camera = shot.get("camera") or {}
    lens = shot.get("lens") or {}
    lines = [
        f"Scene: {shot.get('scene_id', '')}",
        f"Beat: {shot.get('beat_id', '')}",
        "",
        f"Action: {shot.get('action', '')}",
        "",
        f"Intent: {shot.get('intent', '')}",
        "",
        f"Camera: {camera.get('angle', '')}, {camera.get('height', '')}",
        f"Move: {camera.get('movement', '')} ({camera.get('support', '')})",
        f"Lens: {lens.get('mm_range', '')}, {lens.get('rationale', '')}",
    ]
    flags = shot.get("risk_flags") or []
    if flags:
        lines.extend(["", f"Flags: {', '.join(flags)}"])
    return lines


def _shot_slide(prs, shot: Dict[str, Any], index: int, total: int, width: float, height: float) -> None:
    slide = prs.slides.add_slide(prs.slide_layouts[6])
    _fill_background(slide)

    _add_text(slide, f"{shot.get('shot_id', '')}  •  {shot.get('shot_type', '')}",
              MARGIN, 0.3, width - 2 * MARGIN, 0.4, 14, bold=True)

    # Frame (left)
    frame_w = width - 2 * MARGIN - GAP - DETAILS_W
    _add_panel(slide, MARGIN, PANEL_TOP, frame_w, PANEL_H)

    image = load_sketch_image(shot.get("sketch_image_url"))
    if image is not None:
        stream, img_w, img_h = image
        dx, dy, w, h = _fit(img_w, img_h, frame_w - 0.4, PANEL_H - 0.4)
        slide.shapes.add_picture(
            stream,
            Inches(MARGIN + 0.2 + dx),
            Inches(PANEL_TOP + 0.2 + dy),
            Inches(w),
            Inches(h),
        )
    else:
        caption = shot.get("sketch_description") or "Storyboard frame placeholder"
        _add_text(slide, caption, MARGIN + 0.3, PANEL_TOP + 0.2, frame_w - 0.6, PANEL_H - 0.4, 14, color="muted")

    # Details (right)
    details_x = MARGIN + frame_w + GAP
    _add_panel(slide, details_x, PANEL_TOP, DETAILS_W, PANEL_H)
    _add_text(slide, "\n".join(shot_detail_lines(shot)),
              details_x + 0.3, PANEL_TOP + 0.25, DETAILS_W - 0.6, PANEL_H - 0.5, 11)

    _add_text(slide, f"{index} / {total}", width - 1.6, height - 0.5, 1.0, 0.3, 10,
              color="muted", align=PP_ALIGN.RIGHT)


def build_storyboard_pptx(shotlist: Dict[str, Any], metadata: Dict[str, Any]) -> bytes:
    """
    Build the storyboard deck.

    Args:
        shotlist: {"shots": [shot dicts]}
        metadata: project metadata (title, brand, director, dop, aspect_ratio, notes)

    Returns:
        PPTX file contents
    """
    width, height = _layout_for_aspect(metadata.get("aspect_ratio"))

    prs = Presentation()
    prs.slide_width = Inches(width)
    prs.slide_height = Inches(height)
    prs.core_properties.author = "Storyboard Dashboard"
    prs.core_properties.title = safe_text(metadata.get("project_title"), "Untitled")

    _title_slide(prs, metadata, width)

    shots = shotlist.get("shots") or []
    for i, shot in enumerate(shots, start=1):
        _shot_slide(prs, shot, i, len(shots), width, height)

    buffer = io.BytesIO()
    prs.save(buffer)
    logger.info(f"[storyboard_deck] built deck with {len(shots)} shot slides")
    return buffer.getvalue()
