from .base import MetadataSource
from .tmdb_provider import TmdbThemeSource
from .jikan_provider import JikanThemeSource
from .gemini_provider import GeminiThemeSource

__all__ = [
    "MetadataSource",
    "TmdbThemeSource",
    "JikanThemeSource",
    "GeminiThemeSource",
]
