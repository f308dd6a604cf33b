"""
Camera System

Camera and lens vocabulary for storyboard shots. Given the resolved shot
type and the beat text, picks the camera movement, support rig and height,
and explains the lens choice.

This module provides:
1. CameraMovement - Movements a storyboard shot can call for
2. CameraRig - Support rigs paired with those movements
3. LensSpec / CameraSpec - Serializable lens and camera descriptors
4. CameraSystem - Movement/rig/lens selection
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional

from . import patterns

logger = logging.getLogger(__name__)


# ============================================
# CAMERA MOVEMENTS
# ============================================

class CameraMovement(Enum):
    """Movements used on set for commercial/short-form coverage."""
    STATIC = "static"               # Locked off
    TRACK = "track"                 # Follow moving subject
    MICRO_SLIDE = "micro-slide"     # Slow drift across a product/detail


class CameraRig(Enum):
    """Support for each movement."""
    TRIPOD = "tripod"
    DOLLY_GIMBAL = "dolly/gimbal"
    SLIDER_TRIPOD = "slider/tripod"


RIG_FOR_MOVEMENT = MappingProxyType({
    CameraMovement.STATIC: CameraRig.TRIPOD,
    CameraMovement.TRACK: CameraRig.DOLLY_GIMBAL,
    CameraMovement.MICRO_SLIDE: CameraRig.SLIDER_TRIPOD,
})


# ============================================
# LENSES
# ============================================

# Keyed by shot type label
LENS_RATIONALES = MappingProxyType({
    "WS": "Spatial context, geography",
    "MS": "Natural perspective, subject focus",
    "MCU": "Intimacy while retaining context",
    "CU": "Emotional emphasis, isolation",
    "ECU": "Maximum intimacy, detail",
    "INSERT": "Product detail, texture",
    "OTS": "Spatial relationship, dialogue",
})
DEFAULT_LENS_RATIONALE = "Standard coverage"


@dataclass(frozen=True)
class LensSpec:
    """
    Lens choice for a shot.

    Attributes:
        focal_length: Focal length in mm
        rationale: Why this focal length suits the framing
    """
    focal_length: int = 35
    rationale: str = DEFAULT_LENS_RATIONALE

    @property
    def mm_range(self) -> str:
        return f"{self.focal_length}mm"

    @classmethod
    def for_shot(cls, shot_type: str, focal_length: int) -> "LensSpec":
        return cls(
            focal_length=focal_length,
            rationale=LENS_RATIONALES.get(shot_type, DEFAULT_LENS_RATIONALE),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"mm_range": self.mm_range, "rationale": self.rationale}


# ============================================
# CAMERA SPEC
# ============================================

@dataclass(frozen=True)
class CameraSpec:
    """Camera placement and movement for one shot."""
    angle: str = "eye-level"        # eye-level, low, flat, 45°
    height: str = "chest"           # chest, table
    movement: CameraMovement = CameraMovement.STATIC
    rig: CameraRig = CameraRig.TRIPOD

    def to_dict(self) -> Dict[str, str]:
        return {
            "angle": self.angle,
            "height": self.height,
            "movement": self.movement.value,
            "support": self.rig.value,
        }


# ============================================
# CAMERA SYSTEM
# ============================================

class CameraSystem:
    """
    Selects movement, rig and height for a classified beat.

    Moving subjects get a tracking move on a stabilized rig, inserts a slow
    slider move at table height, everything else stays locked off.
    """

    def select_camera(self, text: str, shot_type: str, angle: str) -> CameraSpec:
        is_insert = shot_type == "INSERT"

        if patterns.ACTION.search(text):
            movement = CameraMovement.TRACK
        elif is_insert:
            movement = CameraMovement.MICRO_SLIDE
        else:
            movement = CameraMovement.STATIC

        return CameraSpec(
            angle=angle,
            height="table" if is_insert else "chest",
            movement=movement,
            rig=RIG_FOR_MOVEMENT[movement],
        )

    def select_lens(self, shot_type: str, focal_length: int) -> LensSpec:
        return LensSpec.for_shot(shot_type, focal_length)


# Singleton instance
_camera_system: Optional[CameraSystem] = None


def get_camera_system() -> CameraSystem:
    """Get or create the global camera system."""
    global _camera_system
    if _camera_system is None:
        _camera_system = CameraSystem()
    return _camera_system
