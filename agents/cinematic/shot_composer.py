"""
Shot Composer - Deterministic shot classification

Maps one beat of screenplay action text, plus its position in the shot
list, to a shot type, camera, lens, intent, continuity notes, risk flags
and a storyboard sketch caption.

Classification rules (first match wins):
1. First shot of the list          -> WS establishing, 24mm, eye-level
2. Product + close-up/insert words -> INSERT, 100mm, flat
3. Insert words                    -> INSERT, 100mm, 45°
4. Close-up words                  -> CU, 85mm, eye-level
5. Dialogue without action         -> MCU, 50mm, eye-level
6. Action words                    -> WS, 24mm, low
7. Product alone                   -> MCU, 50mm, eye-level
8. Anything else                   -> MS, 35mm, eye-level

The composer holds no state between calls; the same text and position
always produce the same shot.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from models.beat import ScriptBeat

from . import patterns
from .camera_system import CameraSpec, CameraSystem, LensSpec, get_camera_system

logger = logging.getLogger(__name__)


# ============================================
# SHOT TYPES
# ============================================

class ShotType(Enum):
    """Shot sizes used on the storyboard."""
    WIDE = "WS"
    MEDIUM = "MS"
    MEDIUM_CLOSE_UP = "MCU"
    CLOSE_UP = "CU"
    EXTREME_CLOSE_UP = "ECU"
    INSERT = "INSERT"
    OVER_THE_SHOULDER = "OTS"


# ============================================
# BEAT FEATURES
# ============================================

@dataclass(frozen=True)
class BeatFeatures:
    """Which keyword patterns a beat's text matches."""
    close_up: bool = False
    product: bool = False
    insert: bool = False
    action: bool = False
    dialogue: bool = False

    @classmethod
    def from_text(cls, text: str) -> "BeatFeatures":
        return cls(
            close_up=bool(patterns.CLOSE_UP.search(text)),
            product=bool(patterns.PRODUCT.search(text)),
            insert=bool(patterns.INSERT.search(text)),
            action=bool(patterns.ACTION.search(text)),
            dialogue=patterns.is_dialogue(text),
        )


@dataclass(frozen=True)
class ShotClassification:
    shot_type: ShotType
    focal_length: int
    angle: str


ESTABLISHING = ShotClassification(ShotType.WIDE, 24, "eye-level")
PRODUCT_INSERT = ShotClassification(ShotType.INSERT, 100, "flat")
DETAIL_INSERT = ShotClassification(ShotType.INSERT, 100, "45°")
CLOSE_UP = ShotClassification(ShotType.CLOSE_UP, 85, "eye-level")
DIALOGUE_MCU = ShotClassification(ShotType.MEDIUM_CLOSE_UP, 50, "eye-level")
ACTION_WIDE = ShotClassification(ShotType.WIDE, 24, "low")
PRODUCT_MCU = ShotClassification(ShotType.MEDIUM_CLOSE_UP, 50, "eye-level")
DEFAULT_SHOT = ShotClassification(ShotType.MEDIUM, 35, "eye-level")

# Checked in order after the establishing rule
SHOT_RULES: Tuple[Tuple[Any, ShotClassification], ...] = (
    (lambda f: f.product and (f.close_up or f.insert), PRODUCT_INSERT),
    (lambda f: f.insert, DETAIL_INSERT),
    (lambda f: f.close_up, CLOSE_UP),
    (lambda f: f.dialogue and not f.action, DIALOGUE_MCU),
    (lambda f: f.action, ACTION_WIDE),
    (lambda f: f.product, PRODUCT_MCU),
)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def resolve_shot(features: BeatFeatures, shot_number: int) -> ShotClassification:
    """Apply the precedence rules to already-extracted features."""
    if shot_number == 1:
        return ESTABLISHING
    for matches, classification in SHOT_RULES:
        if matches(features):
            return classification
    return DEFAULT_SHOT


# ============================================
# DERIVED FIELDS
# ============================================

def generate_intent(text: str) -> str:
    """What the shot is for, in editorial terms."""
    if patterns.is_dialogue(text):
        return "Deliver dialogue / emotional beat"
    if patterns.REACTION.search(text):
        return "Show character reaction"
    if patterns.PRESENTATION.search(text) and patterns.PRODUCT.search(text):
        return "Product showcase"
    if patterns.ACTION.search(text):
        return "Action coverage"
    return "Advance narrative"


def continuity_notes(features: BeatFeatures) -> Dict[str, str]:
    triggered = {
        "line_of_action": features.action,
        "eyelines": features.dialogue,
        "match_action": features.action,
        "props_wardrobe": features.product,
    }
    return {
        key: active if triggered[key] else inactive
        for key, (active, inactive) in patterns.CONTINUITY_NOTES.items()
    }


def compute_risk_flags(features: BeatFeatures, shot_type: ShotType) -> List[str]:
    """Framing warnings; several may apply to the same beat."""
    flags = []
    if features.product and shot_type not in (ShotType.INSERT, ShotType.MEDIUM_CLOSE_UP):
        flags.append("Product beat not framed as INSERT/MCU")
    if features.dialogue and shot_type == ShotType.WIDE:
        flags.append("Dialogue in WS may reduce clarity")
    if features.insert and shot_type != ShotType.INSERT:
        flags.append("Insert beat not framed as INSERT")
    return flags


def sketch_description(text: str, shot_type: ShotType) -> str:
    """Caption for the storyboard frame."""
    subject = patterns.find_subject(text)

    if shot_type == ShotType.INSERT:
        product = patterns.find_product(text)
        return f"Insert/macro of {product}: clean background, soft studio lighting, crisp texture detail"
    if shot_type in (ShotType.CLOSE_UP, ShotType.EXTREME_CLOSE_UP):
        return f"Close-up on {subject}'s face: clear emotional reaction, shallow depth of field"
    if shot_type == ShotType.WIDE:
        return f"Wide shot of {subject} in environment: show geography, studio/ground context"
    if patterns.is_dialogue(text):
        return f"Medium shot of {subject} speaking: clean eyeline, readable expression"
    if not text:
        return f"Medium shot of {subject}"
    excerpt = text[:60] + ("…" if len(text) > 60 else "")
    return f"Medium shot of {subject}: {excerpt}"


# ============================================
# SHOT
# ============================================

@dataclass(frozen=True)
class Shot:
    """One storyboard shot, derived from exactly one beat."""
    shot_id: str
    scene_id: str
    beat_id: str
    shot_type: ShotType
    action: str
    intent: str
    camera: CameraSpec
    lens: LensSpec
    continuity_notes: Tuple[Tuple[str, str], ...] = ()
    risk_flags: Tuple[str, ...] = ()
    sketch_description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the shot list wire format."""
        return {
            "shot_id": self.shot_id,
            "scene_id": self.scene_id,
            "beat_id": self.beat_id,
            "shot_type": self.shot_type.value,
            "action": self.action,
            "intent": self.intent,
            "camera": self.camera.to_dict(),
            "lens": self.lens.to_dict(),
            "continuity_notes": dict(self.continuity_notes),
            "risk_flags": list(self.risk_flags),
            "sketch_description": self.sketch_description,
        }


# ============================================
# SHOT COMPOSER
# ============================================

class ShotComposer:
    """
    Turns beats into shots.

    Every public method degrades to the default medium shot instead of
    raising, so one odd beat never breaks a shot list.
    """

    def __init__(self, camera_system: Optional[CameraSystem] = None):
        self.camera_system = camera_system or get_camera_system()

    def classify(self, text: Any, shot_number: int) -> Tuple[ShotType, CameraSpec, LensSpec]:
        """
        Resolve shot type, camera and lens for one beat.

        Args:
            text: Beat action text
            shot_number: 1-based position of the shot in the list

        Returns:
            (shot type, camera, lens)
        """
        action = _coerce_text(text)
        try:
            resolved = resolve_shot(BeatFeatures.from_text(action), shot_number)
            camera = self.camera_system.select_camera(action, resolved.shot_type.value, resolved.angle)
        except Exception as e:
            logger.warning(f"[shot_composer] classification fell back to default: {e}")
            resolved = ESTABLISHING if shot_number == 1 else DEFAULT_SHOT
            camera = CameraSpec(angle=resolved.angle)
        lens = self.camera_system.select_lens(resolved.shot_type.value, resolved.focal_length)
        return resolved.shot_type, camera, lens

    def compose_shot(self, beat: ScriptBeat, shot_number: int) -> Shot:
        """Build the full shot for a beat at the given list position."""
        action = _coerce_text(beat.action)
        shot_type, camera, lens = self.classify(action, shot_number)
        shot_id = f"S{shot_number:03d}"

        try:
            features = BeatFeatures.from_text(action)
            return Shot(
                shot_id=shot_id,
                scene_id=beat.scene_id,
                beat_id=beat.beat_id,
                shot_type=shot_type,
                action=action,
                intent=generate_intent(action),
                camera=camera,
                lens=lens,
                continuity_notes=tuple(continuity_notes(features).items()),
                risk_flags=tuple(compute_risk_flags(features, shot_type)),
                sketch_description=sketch_description(action, shot_type),
            )
        except Exception as e:
            logger.warning(f"[shot_composer] {shot_id} derived fields fell back to defaults: {e}")
            return Shot(
                shot_id=shot_id,
                scene_id=beat.scene_id,
                beat_id=beat.beat_id,
                shot_type=shot_type,
                action=action,
                intent="Advance narrative",
                camera=camera,
                lens=lens,
                continuity_notes=tuple(continuity_notes(BeatFeatures()).items()),
                sketch_description=sketch_description("", shot_type),
            )

    def build_shotlist(self, structured_script: Dict[str, Any]) -> Dict[str, Any]:
        """
        One shot per beat, numbered across all scenes.

        Args:
            structured_script: {"scenes": [{"scene_id", "beats": [...]}, ...]}

        Returns:
            {"shots": [shot dicts]}
        """
        shots = []
        shot_number = 1
        for scene in structured_script.get("scenes") or []:
            scene_id = str(scene.get("scene_id") or "")
            for beat_data in scene.get("beats") or []:
                beat = ScriptBeat.from_dict(beat_data, scene_id)
                shots.append(self.compose_shot(beat, shot_number).to_dict())
                shot_number += 1

        logger.info(f"[shot_composer] composed {len(shots)} shots")
        return {"shots": shots}


# Singleton instance
_shot_composer: Optional[ShotComposer] = None


def get_shot_composer() -> ShotComposer:
    """Get or create the global shot composer."""
    global _shot_composer
    if _shot_composer is None:
        _shot_composer = ShotComposer()
    return _shot_composer


# ============================================
# CONVENIENCE FUNCTIONS
# ============================================

def classify(text: Any, shot_number: int) -> Tuple[ShotType, CameraSpec, LensSpec]:
    """Classify one beat's text at a 1-based shot position."""
    return get_shot_composer().classify(text, shot_number)


def compose_shot(beat: ScriptBeat, shot_number: int) -> Shot:
    return get_shot_composer().compose_shot(beat, shot_number)


def build_shotlist(structured_script: Dict[str, Any]) -> Dict[str, Any]:
    """Deterministic shot list for a (sentence-normalized) structured script."""
    return get_shot_composer().build_shotlist(structured_script)
