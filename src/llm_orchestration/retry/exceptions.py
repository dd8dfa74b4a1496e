"""
Retry engine exceptions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from llm_orchestration.retry.metadata import RetryMetadata


class RetryExhausted(Exception):
    """
    Raised when every attempt failed.

    Callers are expected to turn this into a pipeline-level failure
    result. It is always chained to the last underlying error.

    Attributes:
        last_error: Error from the final attempt
        retry_metadata: Complete attempt history
    """

    def __init__(
        self,
        last_error: Exception,
        retry_metadata: "RetryMetadata",
    ) -> None:
        self.last_error = last_error
        self.retry_metadata = retry_metadata

        super().__init__(
            f"All {retry_metadata.total_attempts} attempts failed. "
            f"Last error ({type(last_error).__name__}): {last_error}"
        )
