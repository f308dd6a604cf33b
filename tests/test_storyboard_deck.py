"""
Tests for the PPTX storyboard deck builder.
"""
import base64
import io
from unittest.mock import patch

import pytest
import requests
from PIL import Image
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Inches

from agents.cinematic import build_shotlist
from agents.storyboard_deck import (
    build_storyboard_pptx,
    load_sketch_image,
    safe_filename_base,
    shot_detail_lines,
    storyboard_filename,
)

STRUCTURED = {
    "scenes": [
        {"scene_id": "SC001", "beats": [
            {"beat_id": "B001_1", "action": "A kitchen at dawn."},
            {"beat_id": "B001_2", "action": "Arshdeep stares at the bottle."},
            {"beat_id": "B001_3", "action": 'She said, "I love this."'},
        ]},
    ]
}

METADATA = {
    "project_title": "Muesli Launch",
    "brand": "Crunchy Co",
    "director": "A. Rao",
    "dop": "",
    "aspect_ratio": "16:9",
    "notes": "Morning light throughout.",
}


def _data_url(size=(320, 180), color=(200, 200, 200)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def _open(pptx_bytes):
    return Presentation(io.BytesIO(pptx_bytes))


def _slide_text(slide):
    return "\n".join(
        shape.text_frame.text for shape in slide.shapes if shape.has_text_frame
    )


class TestFilenames:

    def test_title_sanitized(self):
        assert storyboard_filename({"project_title": "Muesli Ad / Final!"}) == (
            "Muesli_Ad_Final_Storyboard.pptx"
        )

    def test_missing_title(self):
        assert storyboard_filename({}) == "Storyboard_Storyboard.pptx"

    def test_unusable_title(self):
        assert safe_filename_base("!!!") == "Storyboard"
        assert safe_filename_base(None) == "Storyboard"


class TestBuildDeck:

    def test_one_slide_per_shot_plus_title(self):
        shotlist = build_shotlist(STRUCTURED)
        prs = _open(build_storyboard_pptx(shotlist, METADATA))
        assert len(prs.slides) == 1 + len(shotlist["shots"])

    def test_wide_layout(self):
        prs = _open(build_storyboard_pptx(build_shotlist(STRUCTURED), METADATA))
        assert prs.slide_width == Inches(13.33)
        assert prs.slide_height == Inches(7.5)

    def test_vertical_aspect_uses_a4_layout(self):
        metadata = {**METADATA, "aspect_ratio": "9:16"}
        prs = _open(build_storyboard_pptx(build_shotlist(STRUCTURED), metadata))
        assert prs.slide_width == Inches(10.83)

    def test_title_slide(self):
        prs = _open(build_storyboard_pptx(build_shotlist(STRUCTURED), METADATA))
        text = _slide_text(prs.slides[0])
        assert "Muesli Launch" in text
        assert "Crunchy Co  •  Director: A. Rao  •  AR: 16:9" in text
        assert "DoP" not in text
        assert "Morning light throughout." in text

    def test_title_slide_without_metadata(self):
        prs = _open(build_storyboard_pptx({"shots": []}, {}))
        assert len(prs.slides) == 1
        text = _slide_text(prs.slides[0])
        assert "Untitled" in text
        assert "Generated storyboard" in text

    def test_shot_slide_contents(self):
        shotlist = build_shotlist(STRUCTURED)
        prs = _open(build_storyboard_pptx(shotlist, METADATA))
        text = _slide_text(prs.slides[2])

        assert "S002  •  INSERT" in text
        assert "Action: Arshdeep stares at the bottle." in text
        assert "Lens: 100mm, Product detail, texture" in text
        assert "2 / 3" in text
        # No image: caption stands in for the frame
        assert shotlist["shots"][1]["sketch_description"] in text

    def test_sketch_image_embedded(self):
        shotlist = build_shotlist(STRUCTURED)
        shotlist["shots"][0]["sketch_image_url"] = _data_url()
        prs = _open(build_storyboard_pptx(shotlist, METADATA))

        pictures = [s for s in prs.slides[1].shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
        assert len(pictures) == 1
        assert not any(
            s.shape_type == MSO_SHAPE_TYPE.PICTURE for s in prs.slides[2].shapes
        )

    def test_broken_image_falls_back_to_caption(self):
        shotlist = build_shotlist(STRUCTURED)
        shotlist["shots"][0]["sketch_image_url"] = "data:image/png;base64,notanimage"
        prs = _open(build_storyboard_pptx(shotlist, METADATA))
        assert shotlist["shots"][0]["sketch_description"] in _slide_text(prs.slides[1])


class TestSketchImages:

    def test_data_url(self):
        stream, width, height = load_sketch_image(_data_url(size=(320, 180)))
        assert (width, height) == (320, 180)
        assert stream.read(8) == b"\x89PNG\r\n\x1a\n"

    def test_large_image_downscaled(self):
        _, width, height = load_sketch_image(_data_url(size=(3200, 1800)))
        assert width == 1600
        assert height == 900

    def test_remote_url(self):
        png = base64.b64decode(_data_url().split(",", 1)[1])
        with patch("agents.storyboard_deck.requests.get") as get:
            get.return_value.content = png
            result = load_sketch_image("https://cdn.example.com/1.png")
        assert result is not None
        get.assert_called_once()

    def test_unreachable_url(self):
        with patch("agents.storyboard_deck.requests.get",
                   side_effect=requests.exceptions.ConnectionError("down")):
            assert load_sketch_image("https://cdn.example.com/1.png") is None

    def test_oversized_image_rejected(self, monkeypatch):
        # 320x180 is past twice the lowered pixel limit
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        assert load_sketch_image(_data_url(size=(320, 180))) is None

    def test_oversized_image_falls_back_to_caption(self, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        shotlist = build_shotlist(STRUCTURED)
        shotlist["shots"][0]["sketch_image_url"] = _data_url(size=(320, 180))

        prs = _open(build_storyboard_pptx(shotlist, METADATA))

        assert shotlist["shots"][0]["sketch_description"] in _slide_text(prs.slides[1])

    @pytest.mark.parametrize("url", [
        "file:///etc/passwd",
        "ftp://cdn.example.com/1.png",
        "gopher://localhost:6379/_INFO",
        "/var/tmp/1.png",
    ])
    def test_only_http_urls_fetched(self, url):
        with patch("agents.storyboard_deck.requests.get") as get:
            assert load_sketch_image(url) is None
        get.assert_not_called()

    def test_no_url(self):
        assert load_sketch_image(None) is None
        assert load_sketch_image("") is None


def test_detail_lines_include_flags():
    shot = build_shotlist({"scenes": [{"scene_id": "SC001", "beats": [
        {"beat_id": "B1", "action": "Close-up of the bottle."},
    ]}]})["shots"][0]
    lines = shot_detail_lines(shot)
    assert lines[0] == "Scene: SC001"
    assert lines[-1] == "Flags: Product beat not framed as INSERT/MCU"
