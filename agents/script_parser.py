"""
Script Parser

Turns raw script text into a structured script (scenes -> beats) and
normalizes beats to one sentence each, so the shot list maps one shot
to one sentence.
"""

import logging
import re
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

SCENE_BREAK = re.compile(r"\n{2,}")
WHITESPACE = re.compile(r"\s+")

# Break after . ! ? … unless the remainder has an odd number of quote marks,
# i.e. the break would fall inside a quotation.
SENTENCE_BREAK = re.compile(
    r"(?<=[.!?…])\s+(?=(?:[^\"“”]*[\"“”][^\"“”]*[\"“”])*[^\"“”]*$)"
)

SLUGLINE_MAX = 80
SUMMARY_MAX = 140


def basic_parse(raw: str) -> Dict[str, Any]:
    """
    Split raw script text into scenes on blank lines.

    Each scene keeps its whole block as a single beat; sentence-level
    splitting happens in normalize_structured_script.
    """
    chunks = [c.strip() for c in SCENE_BREAK.split(raw or "")]
    chunks = [c for c in chunks if c]

    scenes = []
    for i, chunk in enumerate(chunks, start=1):
        slugline = chunk.split("\n")[0][:SLUGLINE_MAX] or f"Scene {i}"
        scenes.append({
            "scene_id": f"SC{i:03d}",
            "slugline": slugline,
            "location": "",
            "time": "",
            "characters": [],
            "beats": [
                {
                    "beat_id": "B001",
                    "beat_summary": chunk[:SUMMARY_MAX],
                    "dialogue": "",
                    "action": chunk,
                }
            ],
        })

    logger.info(f"[script_parser] parsed {len(scenes)} scenes")
    return {"scenes": scenes}


def split_into_sentences(text: str) -> List[str]:
    cleaned = WHITESPACE.sub(" ", str(text or "")).strip()
    if not cleaned:
        return []

    parts = [p.strip() for p in SENTENCE_BREAK.split(cleaned)]
    parts = [p for p in parts if p]
    return parts or [cleaned]


def normalize_structured_script(structured: Dict[str, Any]) -> Dict[str, Any]:
    """
    Expand every beat into sentence-level sub-beats.

    Sub-beat ids are ``<beat_id>_<n>`` with the source beat id kept as
    ``parent_beat_id``. A beat without text still yields one empty
    sub-beat so shots stay aligned with the script.
    """
    scenes = []
    for scene in structured.get("scenes") or []:
        expanded = []
        for idx, beat in enumerate(scene.get("beats") or []):
            action = beat.get("action")
            if action is None:
                action = beat.get("text")
            parent_id = beat.get("beat_id") or f"B{idx}"
            sentences = split_into_sentences(action)

            if not sentences:
                expanded.append({
                    **beat,
                    "action": "",
                    "parent_beat_id": beat.get("beat_id"),
                    "beat_id": f"{parent_id}_1",
                })
                continue

            for j, sentence in enumerate(sentences, start=1):
                expanded.append({
                    **beat,
                    "action": sentence,
                    "parent_beat_id": beat.get("beat_id"),
                    "beat_id": f"{parent_id}_{j}",
                })

        scenes.append({**scene, "beats": expanded})

    return {**structured, "scenes": scenes}


def count_beats(structured: Dict[str, Any]) -> int:
    return sum(len(scene.get("beats") or []) for scene in structured.get("scenes") or [])
