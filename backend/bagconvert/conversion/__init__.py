from .service import ConversionService, get_conversion_service
from .models import ConversionRequest, ConversionResult, MediaKind, SupportedFormats, Tier

__all__ = [
    "ConversionService",
    "get_conversion_service",
    "ConversionRequest",
    "ConversionResult",
    "MediaKind",
    "SupportedFormats",
    "Tier",
]
