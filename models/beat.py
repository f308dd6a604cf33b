# models/beat.py

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ScriptBeat:
    """
    One unit of screenplay action text.

    Sentence-level sub-beats keep the id of the beat they were split from
    in ``parent_beat_id``.
    """
    beat_id: str
    scene_id: str
    action: str = ""
    parent_beat_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], scene_id: str) -> "ScriptBeat":
        action = data.get("action")
        if action is None:
            action = data.get("text")
        return cls(
            beat_id=str(data.get("beat_id") or ""),
            scene_id=scene_id,
            action=str(action or "").strip(),
            parent_beat_id=data.get("parent_beat_id"),
        )
