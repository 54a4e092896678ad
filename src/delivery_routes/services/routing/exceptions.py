"""Errors raised by the route optimization services."""


class RouteOptimizationError(Exception):
    """Base class for route optimization failures."""


class EmptyInputError(RouteOptimizationError, ValueError):
    """Raised when an optimization is requested without any stops."""


class ExternalServiceError(RouteOptimizationError):
    """Raised when the distance or directions service cannot produce a usable answer."""
