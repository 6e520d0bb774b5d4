"""Dataset emitters — C source initializer and JSON."""

from .emitter import EMITTERS, render_c_source, render_json

__all__ = ["EMITTERS", "render_c_source", "render_json"]
