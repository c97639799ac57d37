"""Service layer package.

Exports high-level services consumed by the command line entry point.
"""

from .export_service import ExportService, ExportServiceConfig

__all__ = ["ExportService", "ExportServiceConfig"]
