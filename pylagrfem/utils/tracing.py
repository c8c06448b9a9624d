"""pylagrfem.utils.tracing
Named diagnostic channels for the local computations.

Channels are switched on once, at setup, either explicitly::

    TraceControl({"qr", "rsfvals"})

or through the ``PYLAGRFEM_TRACE`` environment variable (comma separated
channel names, ``all`` for every channel).  Records go to the logger
``pylagrfem.trace.<channel>`` at DEBUG level; attaching a handler is up to the
application.
"""
import logging
import os
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

ENV_VAR = "PYLAGRFEM_TRACE"

CHANNELS = frozenset({
    "qr",        # quadrature rules selected by the preprocessor
    "rsfvals",   # cached shape-function values
    "gradvals",  # cached reference gradients
    "geometry",  # per-cell mapped points, Jacobians, integration elements
    "element",   # per-cell local matrices
})


class TraceControl:
    """Set of enabled trace channels; immutable after construction."""

    def __init__(self, channels: Optional[Iterable[str]] = None):
        if isinstance(channels, str):
            channels = [channels]
        names = set(channels or ())
        if "all" in names:
            names = set(CHANNELS)
        unknown = names - CHANNELS
        if unknown:
            raise ValueError(f"Unknown trace channel(s) {sorted(unknown)}; "
                             f"known channels are {sorted(CHANNELS)}")
        self._enabled = frozenset(names)
        self._loggers = {c: logging.getLogger(f"pylagrfem.trace.{c}") for c in self._enabled}

    @classmethod
    def from_env(cls, environ=None) -> "TraceControl":
        environ = os.environ if environ is None else environ
        raw = environ.get(ENV_VAR, "")
        names = [s.strip() for s in raw.split(",") if s.strip()]
        if names:
            logger.debug(f"Tracing enabled from {ENV_VAR}: {names}")
        return cls(names)

    @property
    def channels(self) -> frozenset:
        return self._enabled

    def enabled(self, channel: str) -> bool:
        return channel in self._enabled

    def emit(self, channel: str, name: str, producer: Callable[[], object]) -> None:
        """Log ``producer()`` under ``name`` if ``channel`` is on.

        ``producer`` is not called for disabled channels.
        """
        if channel not in self._enabled:
            return
        self._loggers[channel].debug("%s:\n%s", name, producer())

    def __repr__(self):
        return f"TraceControl({sorted(self._enabled)})"


def resolve(trace) -> TraceControl:
    """Accept None (environment), a TraceControl, a channel name or an iterable of names."""
    if trace is None:
        return TraceControl.from_env()
    if isinstance(trace, TraceControl):
        return trace
    return TraceControl(trace)
