# SPDX-License-Identifier: MIT


class ValidationError(Exception):
    """Raised when local input is rejected before any remote call."""

    pass


class RemoteError(Exception):
    """A remote call reported failure."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProgrammerError(Exception):
    """Raised when a caller operates outside the contract, e.g. on an unknown id."""

    pass
