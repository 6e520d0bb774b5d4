"""HorizonFetch exceptions.

Only configuration problems are raised as exceptions. Transport failures stay
inside the request that hit them and are reported through its terminal state.
"""

from __future__ import annotations


class HorizonFetchError(Exception):
    """Base class for all HorizonFetch errors."""


class ConfigurationError(HorizonFetchError):
    """Invalid run parameters, detected before any network activity."""


class CommandTemplateError(ConfigurationError):
    """The Horizons command template is missing a required placeholder."""
