from __future__ import annotations


class LayerError(Exception):
    """Base class for every failure raised by brushstack."""


class ConfigurationError(LayerError, ValueError):
    pass


class PrerequisiteError(LayerError, RuntimeError):
    """An asynchronous prerequisite (image load, job) did not complete."""


class LayerStateError(LayerError, RuntimeError):
    pass


class PersistenceError(LayerError, OSError):
    pass


class LayerTimeoutError(LayerError, TimeoutError):
    pass
