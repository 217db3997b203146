"""Module de génération d'images et de vidéos avec Gemini (Nano Banana) et Veo."""

from chicpic.generation.exceptions import (
    GenerationError,
    ClientNotConfiguredError,
    ModelCallError,
    ErrorKind,
    ImageLoadError,
    VideoGenerationError,
    VideoBlockedError,
)
from chicpic.generation.client import (
    GeminiClient,
    UnconfiguredClient,
    GenerationParams,
    build_client,
)
from chicpic.generation.orchestrator import (
    GenerationOrchestrator,
    GenerationRequest,
    GenerationOutcome,
    ReferenceImage,
)
from chicpic.generation.prompt_builder import (
    AssetType,
    LookMode,
    build_prompt,
)
from chicpic.generation.response_parser import ParsedResponse, parse_response
from chicpic.generation.validator import is_valid_image
from chicpic.generation.placeholder import create_placeholder
from chicpic.generation.video import VideoGenerator, LookImage

__all__ = [
    "GenerationError",
    "ClientNotConfiguredError",
    "ModelCallError",
    "ErrorKind",
    "ImageLoadError",
    "VideoGenerationError",
    "VideoBlockedError",
    "GeminiClient",
    "UnconfiguredClient",
    "GenerationParams",
    "build_client",
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationOutcome",
    "ReferenceImage",
    "AssetType",
    "LookMode",
    "build_prompt",
    "ParsedResponse",
    "parse_response",
    "is_valid_image",
    "create_placeholder",
    "VideoGenerator",
    "LookImage",
]
