"""Errors raised by the core and the storage layer."""


class BeenThereError(Exception):
    """Base class for application errors."""


class InvalidInputError(BeenThereError):
    """Malformed coordinates or request data."""


class DuplicateVisitError(InvalidInputError):
    """The user already has a visit at or near this location."""


class ProviderError(BeenThereError):
    """Upstream geocoding failure, non-2xx status or timeout."""


class NotFoundError(BeenThereError):
    """A storage lookup found nothing."""
