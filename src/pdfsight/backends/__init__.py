"""Model backends."""

from pdfsight.backends.vision_openai import VisionBackend

__all__ = ["VisionBackend"]
