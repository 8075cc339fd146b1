"""Record export service package."""

from .exporter import EXPORT_FORMATS, build_frame, export_module, flatten_record

__all__ = ["EXPORT_FORMATS", "build_frame", "export_module", "flatten_record"]
