"""Visit store exceptions."""


class StoreError(Exception):
    """Base class for counter store failures."""


class StoreUnavailable(StoreError):
    """The store could not complete the operation; callers may fall back."""
