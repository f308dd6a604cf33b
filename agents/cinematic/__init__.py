"""
Cinematic System

Deterministic shot planning for storyboards: shot type, camera, lens,
continuity and framing risks for each beat of a script.

Usage:
    from agents.cinematic import classify, build_shotlist

    shot_type, camera, lens = classify("Arshdeep stares at the bottle.", 2)
    shotlist = build_shotlist(structured_script)

Components:
    - CameraSystem: movement, rig and lens selection
    - ShotComposer: rule-based shot classification
"""

# Camera System
from .camera_system import (
    CameraMovement,
    CameraRig,
    CameraSpec,
    CameraSystem,
    LensSpec,
    get_camera_system,
)

# Shot Composer
from .shot_composer import (
    BeatFeatures,
    Shot,
    ShotComposer,
    ShotType,
    build_shotlist,
    classify,
    compose_shot,
    get_shot_composer,
)

__all__ = [
    # Camera
    "CameraMovement",
    "CameraRig",
    "CameraSpec",
    "CameraSystem",
    "LensSpec",
    "get_camera_system",

    # Shot
    "BeatFeatures",
    "Shot",
    "ShotComposer",
    "ShotType",
    "build_shotlist",
    "classify",
    "compose_shot",
    "get_shot_composer",
]
