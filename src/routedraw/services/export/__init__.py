"""Export services."""

from .serializer import (
    EXPORT_FORMATS,
    ExportDocument,
    save_export,
    serialize,
)

__all__ = [
    "EXPORT_FORMATS",
    "ExportDocument",
    "save_export",
    "serialize",
]
