"""roastlog - humorous annotations for print() output"""

from __future__ import annotations

__version__ = "0.1.0"


def __getattr__(name: str):
    """
    Lazy imports to avoid loading the remote client when only importing lightweight modules.
    """
    if name in ("RoastLog", "StatusSnapshot", "PerformanceMetrics", "NotInitializedError"):
        from roastlog import roast

        return getattr(roast, name)

    if name in ("RoastConfig", "ConfigurationError", "load_config"):
        from roastlog import config

        return getattr(config, name)

    if name == "classify":
        from roastlog.classification.analyzer import classify

        return classify

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ConfigurationError",
    "NotInitializedError",
    "PerformanceMetrics",
    "RoastConfig",
    "RoastLog",
    "StatusSnapshot",
    "classify",
    "load_config",
]
