"""
Result wrapper returned by fallible import operations.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

E = TypeVar('E')


class ResultModel(BaseModel, Generic[E]):
    """
    Outcome of an operation that reports expected failures instead of raising.

    Starts unsuccessful with an empty data list. It is finalized exactly once,
    either with fail() or succeed(). data is only meaningful on success.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool = Field(False, description="Operation success flag")
    message: Optional[str] = Field(None, description="Failure reason")
    data: List[E] = Field(default_factory=list, description="Produced records")

    def fail(self, message: str) -> 'ResultModel[E]':
        if not message:
            raise ValueError("A failed result requires a message")
        self.success = False
        self.message = message
        self.data = []
        return self

    def succeed(self) -> 'ResultModel[E]':
        self.success = True
        self.message = None
        return self

    def result_info(self) -> Dict[str, Any]:
        """Status summary without the data payload."""
        return {'success': self.success, 'message': self.message}
