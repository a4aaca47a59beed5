from .resolution_workflow import process_library, resolve_series

__all__ = ["process_library", "resolve_series"]
