"""
Single-slot completion reporting for background stream operations.
"""

import concurrent.futures
import logging
from concurrent.futures import Future
from typing import Optional

logger = logging.getLogger(__name__)


class OutcomeSlot:
    """
    Holds the terminal outcome of one background operation.

    Exactly one value is deposited: ``None`` for success or the first error
    the operation hit. Waiting before the value exists blocks until it does.
    """

    def __init__(self, name: str = "operation"):
        self.name = name
        self._future: Future = Future()

    def deposit(self, error: Optional[BaseException] = None) -> None:
        """Store the outcome. May only be called once."""
        try:
            self._future.set_result(error)
        except concurrent.futures.InvalidStateError as e:
            raise RuntimeError(f"outcome of {self.name} already deposited") from e

        if error is None:
            logger.debug(f"{self.name} finished successfully")
        else:
            logger.debug(f"{self.name} finished with error: {error}")

    def done(self) -> bool:
        return self._future.done()

    def wait(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        """
        Block until the outcome is deposited.

        Args:
            timeout: Maximum seconds to wait, None waits forever

        Returns:
            The deposited error, or None if the operation succeeded

        Raises:
            TimeoutError: If no outcome was deposited within ``timeout``
        """
        try:
            return self._future.result(timeout)
        except concurrent.futures.TimeoutError as e:
            raise TimeoutError(f"{self.name} did not finish within {timeout}s") from e

    def raise_for_error(self, timeout: Optional[float] = None) -> None:
        error = self.wait(timeout)
        if error is not None:
            raise error

    def __repr__(self) -> str:
        if not self.done():
            return f"OutcomeSlot({self.name!r}, pending)"
        return f"OutcomeSlot({self.name!r}, error={self._future.result()!r})"
