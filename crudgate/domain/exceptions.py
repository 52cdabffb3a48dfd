"""Domain exceptions.

Permission and identity-precondition failures are not exceptions: the
controllers answer them with an ActionResult before the repository is
touched.
"""


class CrudError(Exception):
    """Base exception for crudgate."""

    pass


class InvalidArgumentError(CrudError, ValueError):
    """A required repository argument was None."""

    pass


class NotFoundError(CrudError, LookupError):
    """No stored entity matches the requested identity."""

    pass


class UnsupportedOperationError(CrudError, NotImplementedError):
    """The operation is deliberately disabled on this repository."""

    pass
