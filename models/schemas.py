"""
Request/response schemas for the storyboard API.

Metadata -> structured script (scenes -> beats) -> shot list.
"""

from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field


AspectRatio = Literal["16:9", "9:16", "1:1", "4:5"]
ShotTypeLabel = Literal["WS", "MS", "MCU", "CU", "ECU", "INSERT", "OTS"]


class Metadata(BaseModel):
    """Project metadata shown on the storyboard title slide."""

    project_title: str = Field(
        "Storyboard",
        validation_alias=AliasChoices("project_title", "project_name"),
        description="Project title",
    )
    brand: Optional[str] = None
    director: Optional[str] = None
    dop: Optional[str] = None
    aspect_ratio: AspectRatio = Field("16:9", description="Frame aspect ratio")
    language: Optional[str] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Structured script
# ---------------------------------------------------------------------------

class BeatModel(BaseModel):
    beat_id: str
    action: Optional[str] = None
    text: Optional[str] = None
    beat_summary: Optional[str] = None
    dialogue: Optional[str] = None
    parent_beat_id: Optional[str] = None


class SceneModel(BaseModel):
    scene_id: str
    title: Optional[str] = None
    slugline: Optional[str] = None
    location: Optional[str] = None
    time: Optional[str] = None
    characters: List[str] = Field(default_factory=list)
    beats: List[BeatModel] = Field(default_factory=list)


class StructuredScript(BaseModel):
    """Parsed script: scenes, each holding ordered beats."""

    scenes: List[SceneModel] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Shot list
# ---------------------------------------------------------------------------

class CameraModel(BaseModel):
    angle: str
    height: str
    movement: str
    support: str


class LensModel(BaseModel):
    mm_range: str
    rationale: str


class ShotModel(BaseModel):
    shot_id: str
    scene_id: str
    beat_id: str

    shot_type: ShotTypeLabel
    action: str
    intent: str

    camera: CameraModel
    lens: LensModel

    continuity_notes: Dict[str, str] = Field(default_factory=dict)
    risk_flags: List[str] = Field(default_factory=list)

    # Storyboard frame caption; the image fields are filled by the sketch generator
    sketch_description: str = ""
    sketch_image_url: Optional[str] = None
    sketch_error: Optional[str] = None


class Shotlist(BaseModel):
    shots: List[ShotModel]
