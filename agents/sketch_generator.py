"""
Sketch Generator - Storyboard frames via the OpenAI images API

Turns each shot's sketch description into a pencil-style storyboard frame.
Single-shot failures are recorded on the shot and never stop the batch.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

import config

logger = logging.getLogger(__name__)

SKETCH_FAILED = "Generation failed"


class SketchGenerationError(RuntimeError):
    """The image API did not return a usable image."""


def sketch_enabled() -> bool:
    return bool(config.get_sketch_settings()["api_key"])


def build_sketch_prompt(shot_description: str, shot_type: str, style: str) -> str:
    return (
        f"Professional film storyboard frame, {style}, {shot_type} shot composition: "
        f"{shot_description}. \n\n"
        "Style details: Hand-drawn pencil sketch on white storyboard paper, cinematic "
        "lighting, grayscale, film production quality, clear lines, professional "
        "storyboard artist style, single frame composition, no text, no letters, no "
        "watermarks, clean illustration, detailed shading, movie scene visualization."
    )


def generate_storyboard_sketch(
    shot_description: str,
    shot_type: str,
    style: Optional[str] = None,
) -> str:
    """
    Generate one storyboard frame.

    Returns:
        Image URL, or a ``data:image/png;base64,...`` URL when the API
        answers with inline image data.

    Raises:
        SketchGenerationError on any API or response failure.
    """
    settings = config.get_sketch_settings()
    if not settings["api_key"]:
        raise SketchGenerationError("OPENAI_API_KEY is not configured")

    prompt = build_sketch_prompt(shot_description, shot_type, style or settings["style"])
    logger.info(f"[sketch_generator] generating sketch for: {shot_description[:50]}...")

    try:
        response = requests.post(
            f"{settings['api_base'].rstrip('/')}/images/generations",
            headers={
                "Authorization": f"Bearer {settings['api_key']}",
                "Content-Type": "application/json",
            },
            json={
                "model": settings["model"],
                "prompt": prompt,
                "n": 1,
                "size": settings["size"],
                "quality": settings["quality"],
                "response_format": "url",
            },
            timeout=settings["timeout"],
        )
        response.raise_for_status()
        image_data = response.json()["data"][0]
        if not isinstance(image_data, dict):
            raise TypeError(f"image item is {type(image_data).__name__}")
    except requests.exceptions.RequestException as e:
        detail = ""
        if getattr(e, "response", None) is not None:
            detail = f" ({e.response.text[:300]})"
        raise SketchGenerationError(f"Sketch generation failed: {e}{detail}") from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise SketchGenerationError(f"Unexpected image API response: {e}") from e

    if image_data.get("url"):
        return image_data["url"]
    if image_data.get("b64_json"):
        return f"data:image/png;base64,{image_data['b64_json']}"
    raise SketchGenerationError("No image data in response")


def generate_all_sketches(
    shots: List[Dict[str, Any]],
    style: Optional[str] = None,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[Dict[str, Any]]:
    """
    Add ``sketch_image_url`` to every shot, one API call at a time.

    Returns new shot dicts; the input list is not modified.
    """
    delay = config.get_sketch_settings()["delay"]
    updated = []

    for i, shot in enumerate(shots):
        description = shot.get("sketch_description") or f"{shot.get('shot_type')} shot: {shot.get('action', '')}"
        try:
            image_url = generate_storyboard_sketch(description, shot.get("shot_type", "MS"), style)
            updated.append({**shot, "sketch_image_url": image_url})
        except SketchGenerationError as e:
            logger.error(f"[sketch_generator] failed for {shot.get('shot_id')}: {e}")
            updated.append({**shot, "sketch_image_url": None, "sketch_error": SKETCH_FAILED})

        if on_progress:
            on_progress(i + 1, len(shots))
        if delay > 0 and i < len(shots) - 1:
            time.sleep(delay)

    return updated
