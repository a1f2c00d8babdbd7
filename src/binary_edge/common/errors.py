"""Exception taxonomy shared by the engine and its collaborators."""

from __future__ import annotations


class BinaryEdgeError(Exception):
    """Base class for all binary-edge errors."""


class DomainError(BinaryEdgeError, ValueError):
    """Pricing or quoting inputs outside the model's domain (e.g. sigma <= 0)."""


class TransportError(BinaryEdgeError):
    """An external call failed: network, timeout, non-2xx or malformed payload."""


class RiskHalt(BinaryEdgeError):
    """A policy stop (zero balance, exposure cap). Logged as HALT, not ERROR."""


class ConfigurationError(BinaryEdgeError):
    """Required configuration (e.g. venue credentials) is missing."""
