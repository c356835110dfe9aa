"""Exception hierarchy for sgpt"""


class SgptError(Exception):
    """Base exception for all sgpt errors"""

    def __init__(self, message: str, *, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class InvalidConfiguration(SgptError):
    """Configuration could not be resolved or failed validation"""


class UnsupportedModel(SgptError):
    """The adapter has no request encoding for the model"""


class APIRequestFailed(SgptError):
    """Transport failure or non-2xx vendor response"""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
        provider: str | None = None,
    ):
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.provider = provider


class NoResponseGenerated(SgptError):
    """The vendor answered 2xx but returned no usable completion"""
