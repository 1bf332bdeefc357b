from content_ingest.errors import UnsupportedPlatformError
from content_ingest.models import Platform

from .base import BaseExtractor, SelectorStrategy
from .medium import MediumExtractor
from .mirror import MirrorExtractor
from .paragraph import ParagraphExtractor

# Map platforms to extractor classes
EXTRACTOR_REGISTRY: dict[Platform, type[BaseExtractor]] = {
    Platform.MEDIUM: MediumExtractor,
    Platform.MIRROR: MirrorExtractor,
    Platform.PARAGRAPH: ParagraphExtractor,
}


def resolve_platform(platform: Platform | str) -> Platform:
    try:
        return Platform(platform)
    except ValueError:
        raise UnsupportedPlatformError(str(platform)) from None


def get_extractor(platform: Platform | str, min_content_length: int = 10) -> BaseExtractor:
    """Instantiate the extractor for `platform`."""
    return EXTRACTOR_REGISTRY[resolve_platform(platform)](min_content_length=min_content_length)


__all__ = [
    "BaseExtractor",
    "SelectorStrategy",
    "MediumExtractor",
    "MirrorExtractor",
    "ParagraphExtractor",
    "EXTRACTOR_REGISTRY",
    "get_extractor",
    "resolve_platform",
]
