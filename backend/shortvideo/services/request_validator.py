"""
Render request validation.

Checks the raw JSON body of a render request in a fixed order and stops at
the first problem, before any network call is made.

Usage:
    validator = RequestValidator()
    request = validator.validate(payload, correlation)
"""

import math
import re
from typing import Any, Mapping, Tuple

from pydantic import ValidationError

from shortvideo.core.errors import RequestValidationError
from shortvideo.core.logging import CorrelationContext, get_logger
from shortvideo.schemas.render import KNOWN_PLATFORMS, KNOWN_TONES, RenderRequest
from shortvideo.services.text import sanitize_text

_DIMENSION = re.compile(r"[0-9]+")


def parse_resolution(resolution: Any) -> Tuple[int, int]:
    """
    Parse a ``"WxH"`` resolution string into positive (width, height).

    Raises:
        RequestValidationError: On wrong segment count, non-numeric or
            non-positive components (all reported as a format error)

    Example:
        >>> parse_resolution("1080x1920")
        (1080, 1920)
    """
    message = f'Invalid resolution format: {resolution}. Expected "WxH"'
    if not isinstance(resolution, str):
        raise RequestValidationError(message)

    parts = resolution.strip().lower().split("x")
    if len(parts) != 2 or not all(_DIMENSION.fullmatch(part.strip()) for part in parts):
        raise RequestValidationError(message)

    width, height = (int(part) for part in parts)
    if width <= 0 or height <= 0:
        raise RequestValidationError(message)
    return width, height


def _is_positive_number(value: Any) -> bool:
    # bool is an int subclass; true/false are not durations
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _scene_duration(scene: Mapping[str, Any]) -> Any:
    for key in ("duration", "durationMs", "duration_ms"):
        if key in scene:
            return scene[key]
    return None


class RequestValidator:
    """
    Validates an inbound render request.

    Order of checks:
    1. scenes is a non-empty list
    2. every scene has text that is not blank once sanitized, and a positive duration
    3. config is present
    4. config.ttsUrl is a non-empty string
    5. config.resolution is "<int>x<int>" with positive components
    """

    def validate(
        self,
        payload: Any,
        correlation: CorrelationContext,
    ) -> RenderRequest:
        """
        Validate ``payload`` and return it as a typed RenderRequest.

        Raises:
            RequestValidationError: On the first failed check
        """
        if not isinstance(payload, Mapping):
            raise RequestValidationError("Request body must be a JSON object")

        scenes = payload.get("scenes")
        if not isinstance(scenes, list):
            raise RequestValidationError("scenes must be an array")
        if not scenes:
            raise RequestValidationError("scenes array cannot be empty")

        for idx, scene in enumerate(scenes):
            self._validate_scene(idx, scene)

        config = payload.get("config")
        if not config:
            raise RequestValidationError("config is required")
        if not isinstance(config, Mapping):
            raise RequestValidationError("config must be an object")

        tts_url = config.get("ttsUrl", config.get("tts_url"))
        if not isinstance(tts_url, str):
            raise RequestValidationError("config.ttsUrl must be a string")
        if not tts_url.strip():
            raise RequestValidationError("config.ttsUrl cannot be empty")

        parse_resolution(config.get("resolution"))

        try:
            request = RenderRequest.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise RequestValidationError(f"{location}: {first['msg']}") from e

        tone, platform = request.config.tone, request.config.platform
        # unknown styles pass through unchanged; the renderer applies its defaults
        get_logger(__name__, correlation).info(
            "Request validation passed",
            extra={
                "scene_count": len(request.scenes),
                "tone": tone,
                "platform": platform,
                "known_style": tone in KNOWN_TONES and platform in KNOWN_PLATFORMS,
            },
        )
        return request

    def _validate_scene(self, idx: int, scene: Any) -> None:
        if not isinstance(scene, Mapping):
            raise RequestValidationError(f"Scene {idx}: must be an object")

        text = scene.get("text")
        if not isinstance(text, str):
            raise RequestValidationError(f"Scene {idx}: text must be a string")
        if not sanitize_text(text).strip():
            raise RequestValidationError(f"Scene {idx}: text cannot be empty")

        if not _is_positive_number(_scene_duration(scene)):
            raise RequestValidationError(f"Scene {idx}: duration must be a positive number")
