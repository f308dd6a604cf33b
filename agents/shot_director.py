"""
Shot Director - Remote agent -> Deterministic composer

Fallback chain:
1. Redis cache of earlier agent shot lists (when REDIS_URL is set)
2. Remote shot director agent (when KIMI_ENABLED and credentials are set)
3. Deterministic ShotComposer (always available)

Agent failure never fails the request: the caller gets the deterministic
shot list with mode "mock-enhanced" instead.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import redis
import requests
from pydantic import ValidationError

import config
from agents.cinematic import build_shotlist
from agents.script_parser import count_beats
from models.schemas import Shotlist
from persistence.redis_store import RedisStore

logger = logging.getLogger(__name__)

MODE_AGENT = "kimi"
MODE_FALLBACK = "mock-enhanced"
MODE_DETERMINISTIC = "mock"

HOLLYWOOD_GUIDE_TEXT = """
Hollywood Shot Breakdown Guideline (condensed):
- Coverage: Establishing/master, then medium/close coverage, OTS where needed, reactions, inserts for key info.
- Continuity: Respect 180-degree line + eyelines + screen direction. Cross line only with motivated method.
- Staging: Use clear blocking. A-I-L staging patterns can guide multi-character layouts.
- Motivated camera: movement must serve story/emotion; lens choice should match emotional distance.
- Edit flow: cut on movement, match action, use inserts as bridges when needed.
"""


class ShotDirectorError(RuntimeError):
    """The remote agent could not produce a usable response."""


def agent_enabled() -> bool:
    settings = config.get_shot_director_settings()
    return bool(settings["enabled"] and settings["api_base"] and settings["api_key"])


def _parse_agent_response(text: str) -> Any:
    """Agent JSON, tolerating a markdown code fence around it."""
    body = text.strip()
    if body.startswith("```"):
        body = body.split("```")[1]
        if body.startswith("json"):
            body = body[len("json"):]
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise ShotDirectorError(f"Agent returned non-JSON: {text[:500]}") from e


def call_agent(agent_id: str, payload: Dict[str, Any]) -> Any:
    """
    POST a payload to a remote agent and return its JSON result.

    Gateways that wrap the result in ``data`` or ``result`` are unwrapped.
    """
    settings = config.get_shot_director_settings()
    base, key = settings["api_base"], settings["api_key"]
    if not base or not key:
        raise ShotDirectorError("Agent not configured. Set KIMI_API_BASE and KIMI_API_KEY.")

    url = f"{base.rstrip('/')}/agents/{quote(agent_id, safe='')}"
    try:
        response = requests.post(
            url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {key}",
            },
            json=payload,
            timeout=settings["timeout"],
        )
    except requests.exceptions.RequestException as e:
        raise ShotDirectorError(f"Agent request failed: {e}") from e

    if not response.ok:
        raise ShotDirectorError(
            f"Agent call failed ({response.status_code}): {response.text[:500]}"
        )

    parsed = _parse_agent_response(response.text)
    if isinstance(parsed, dict):
        if parsed.get("data"):
            return parsed["data"]
        if parsed.get("result"):
            return parsed["result"]
    return parsed


# Shared across requests; left unset for the process once a connect fails
_shotlist_cache: Optional[RedisStore] = None
_cache_unavailable = False


def _get_cache() -> Optional[RedisStore]:
    """Shot list cache, or None when Redis is not configured or unreachable."""
    global _shotlist_cache, _cache_unavailable
    if not config.REDIS_URL or _cache_unavailable:
        return None
    if _shotlist_cache is None:
        try:
            _shotlist_cache = RedisStore(url=config.REDIS_URL)
        except (redis.exceptions.RedisError, ValueError) as e:
            logger.warning(f"[shot_director] shot list cache disabled: {e}")
            _cache_unavailable = True
            return None
    return _shotlist_cache


def _build_payload(
    structured_script: Dict[str, Any],
    metadata: Dict[str, Any],
    guideline_text: str,
) -> Dict[str, Any]:
    total_beats = count_beats(structured_script)
    return {
        "structured_script": structured_script,
        "metadata": metadata,
        "guideline_text": guideline_text,
        "instructions": (
            f"Generate EXACTLY {total_beats} shots: STRICT 1:1 mapping, one shot per "
            "beat/sentence. Do not merge beats. Return JSON { shots: [...] }. "
            "Include sketch_description for each shot."
        ),
    }


def _shotlist_from_agent(payload: Dict[str, Any]) -> Dict[str, Any]:
    agent_id = config.get_shot_director_settings()["agent_id"]
    response = call_agent(agent_id, payload)
    if isinstance(response, dict) and "shotlist" in response:
        response = response["shotlist"]
    return Shotlist.model_validate(response).model_dump(exclude_none=True)


def generate_shotlist(
    structured_script: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None,
    guideline_text: Optional[str] = None,
) -> Tuple[Dict[str, Any], str]:
    """
    Produce a shot list for a sentence-normalized structured script.

    Returns:
        (shotlist, mode) where mode is "kimi", "mock-enhanced" or "mock"
    """
    if not agent_enabled():
        shotlist = Shotlist.model_validate(build_shotlist(structured_script))
        return shotlist.model_dump(exclude_none=True), MODE_DETERMINISTIC

    payload = _build_payload(structured_script, metadata or {}, guideline_text or HOLLYWOOD_GUIDE_TEXT)

    cache = _get_cache()
    if cache is not None:
        try:
            cached = cache.get_shotlist(payload)
            if cached:
                logger.info("[shot_director] loaded cached shot list")
                return cached, MODE_AGENT
        except Exception as e:
            logger.warning(f"[shot_director] cache read failed: {e}")

    try:
        shotlist = _shotlist_from_agent(payload)
    except (ShotDirectorError, ValidationError) as e:
        logger.error(f"[shot_director] agent failed, using deterministic fallback: {e}")
        return build_shotlist(structured_script), MODE_FALLBACK

    if cache is not None:
        try:
            cache.put_shotlist(payload, shotlist)
        except Exception as e:
            logger.warning(f"[shot_director] cache write failed: {e}")

    return shotlist, MODE_AGENT
