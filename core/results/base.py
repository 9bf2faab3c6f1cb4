"""
IResultHandler - sink for messages the engine reports to the user.

Setup only touches it through ISetupHandler.setup_error_handler().
"""

from abc import ABC, abstractmethod


class IResultHandler(ABC):
    """Result sink consumed by the brokerage fault hook."""

    @abstractmethod
    def error_message(self, message: str) -> None:
        """Report a recoverable error."""
        raise NotImplementedError

    @abstractmethod
    def runtime_error(self, message: str) -> None:
        """Report an error that stops the algorithm."""
        raise NotImplementedError
