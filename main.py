import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

# Load .env from project root (works regardless of cwd when uvicorn --reload runs)
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(env_path, override=False)

import config
from agents.script_parser import basic_parse, count_beats, normalize_structured_script
from agents.shot_director import HOLLYWOOD_GUIDE_TEXT, generate_shotlist
from agents.sketch_generator import generate_all_sketches, sketch_enabled
from agents.storyboard_deck import PPTX_MIME, build_storyboard_pptx, storyboard_filename
from models.schemas import Metadata, Shotlist, StructuredScript

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Storyboard Studio")


def _error(message: str, status_code: int, detail=None) -> JSONResponse:
    body = {"error": message}
    if detail is not None:
        body["detail"] = detail
    return JSONResponse(body, status_code=status_code)


async def _json_body(request: Request):
    """Request JSON, or None when the body is missing or malformed."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    errors = exc.errors(include_url=False, include_context=False, include_input=False)
    return _error("Invalid request payload", 422, errors)


@app.get("/health")
async def health():
    """Minimal health check - no deps."""
    return {"status": "ok", "service": "storyboard"}


@app.post("/api/parse-script")
async def parse_script(request: Request):
    """Raw script text -> structured script (one scene per blank-line block)."""
    body = await _json_body(request)
    if not body or not body.get("raw_script_text"):
        return _error("raw_script_text is required", 400)

    metadata = Metadata.model_validate(body.get("metadata") or {})
    structured = StructuredScript.model_validate(basic_parse(str(body["raw_script_text"])))

    return {
        "structured_script": structured.model_dump(exclude_none=True),
        "metadata_used": metadata.model_dump(),
    }


@app.post("/api/generate-shotlist")
async def generate_shotlist_route(request: Request):
    """
    Structured script -> shot list, one shot per sentence-level beat.

    Uses the remote shot director agent when enabled, otherwise (or when it
    fails) the deterministic shot composer.
    """
    body = await _json_body(request)
    if body is None or body.get("structured_script") is None:
        return _error("structured_script is required", 400)

    metadata = Metadata.model_validate(body.get("metadata") or {})
    structured_raw = StructuredScript.model_validate(body["structured_script"])
    structured = normalize_structured_script(structured_raw.model_dump(exclude_none=True))
    guideline_text = str(body.get("guideline_text") or HOLLYWOOD_GUIDE_TEXT)

    logger.info(
        f"Generating {count_beats(structured)} shots from "
        f"{len(structured.get('scenes', []))} scenes (post-normalize)"
    )

    shotlist, mode = await run_in_threadpool(
        generate_shotlist, structured, metadata.model_dump(), guideline_text
    )
    return {"shotlist": shotlist, "mode": mode}


@app.post("/api/generate-sketches")
async def generate_sketches_route(request: Request):
    """Attach a storyboard sketch image URL to every shot."""
    body = await _json_body(request)
    if not body or not body.get("shotlist"):
        return _error("shotlist is required", 400)
    if not sketch_enabled():
        return _error("Sketch generation is not configured (OPENAI_API_KEY)", 503)

    shotlist = Shotlist.model_validate(body["shotlist"]).model_dump(exclude_none=True)
    shots = await run_in_threadpool(
        generate_all_sketches, shotlist["shots"], body.get("sketch_style")
    )
    failed = sum(1 for s in shots if s.get("sketch_error"))
    return {"shotlist": {"shots": shots}, "failed": failed}


@app.post("/api/generate-storyboard")
async def generate_storyboard_route(request: Request):
    """Approved shot list -> PPTX storyboard download."""
    body = await _json_body(request)
    if body is None:
        return _error("Invalid JSON body", 400)

    shotlist_raw = body.get("shotlist") or body.get("approved_shotlist")
    if not shotlist_raw:
        return _error("shotlist is required", 400)

    shotlist = Shotlist.model_validate(shotlist_raw).model_dump(exclude_none=True)
    metadata = Metadata.model_validate(body.get("metadata") or {}).model_dump()

    try:
        pptx_bytes = await run_in_threadpool(build_storyboard_pptx, shotlist, metadata)
    except Exception as e:
        logger.exception("generate-storyboard failed")
        return _error(str(e) or "Unknown error", 500)

    return Response(
        content=pptx_bytes,
        media_type=PPTX_MIME,
        headers={
            "Content-Disposition": f'attachment; filename="{storyboard_filename(metadata)}"',
            "Cache-Control": "no-store",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
