"""UI."""

from filestream.ui.reporter import Reporter

__all__ = ["Reporter"]
