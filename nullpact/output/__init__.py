from .json_formatter import DiagnosticsJSONFormatter

__all__ = ['DiagnosticsJSONFormatter']
