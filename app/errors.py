# errors.py
"""
Exceptions raised by the dashboard core.
"""


class DashboardError(Exception):
    """Base class for dashboard errors."""


class AudioInitError(DashboardError):
    """The audio output could not be opened. Fatal when entering a session."""


class ClipDecodeError(DashboardError):
    """A team radio clip could not be decoded or played. The clip is skipped."""


class NoLiveSessionError(DashboardError):
    """The provider reports that no live session is currently happening."""


class ProviderLoadError(DashboardError):
    """The configured provider factory could not be imported."""
