"""
Gateway business logic services.
"""
from .export import (
    COLLECTIONS,
    parse_flag,
    build_render_options,
    content_disposition,
)

__all__ = [
    "COLLECTIONS",
    "parse_flag",
    "build_render_options",
    "content_disposition",
]
