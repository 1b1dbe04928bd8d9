class PracticeApiUpstreamError(RuntimeError):
    """Raised when the practice backend fails (timeouts, network errors, 5xx responses)."""
    pass


class PracticeApiContractError(RuntimeError):
    """Raised when the practice backend violates its contract (bad envelope or missing data)."""
    pass


class SubmissionRejectedError(RuntimeError):
    """Raised when the backend answers an appointment request with success=false."""
    pass


class DraftInvariantError(AssertionError):
    """Raised when a booking draft reaches a state the step gates should have prevented."""
    pass
