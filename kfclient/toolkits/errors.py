"""
Errors of the resource clients, as seen by the callers.

Every error carries the operation and the object's name for the context,
and chains the original error (if any) as its cause. None of these errors
are retried by the clients themselves.
"""
from typing import Optional


class ClientError(Exception):
    """ The base class for all errors of the resource clients. """

    def __init__(
            self,
            message: str,
            *,
            operation: str,
            name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.name = name


class ValidationError(ClientError):
    """ A pre-write mutator rejected the object; nothing was written. """


class NotFoundError(ClientError):
    """ The store has no object with that name. """


class NotAMemberError(ClientError):
    """ The object exists, but it is not of the client's managed domain. """


class StoreError(ClientError):
    """ The store call itself failed: network, permissions, server errors. """


class ConflictError(StoreError):
    """ The object was created or modified concurrently (HTTP 409). """
