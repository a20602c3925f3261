"""DairyFlow: operations dashboard for a dairy distribution business."""

__version__ = "0.1.0"
