from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dashboard-widget-engine")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from widget_engine.render import render_chart  # noqa: E402

__all__ = ["__version__", "render_chart"]
