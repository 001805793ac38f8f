from itep_scheduler.models import BookingResponse


class RemoteSchedulingError(RuntimeError):
    """Base class for failures talking to the remote scheduling API."""


class TransportError(RemoteSchedulingError):
    """Connection failure or timeout; no HTTP response was read."""


class DecodeError(RemoteSchedulingError):
    """The response body is not JSON or does not have the expected shape."""


class RemoteRejection(RemoteSchedulingError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class SemanticFailure(RemoteSchedulingError):
    """The booking call succeeded over HTTP but the API reports it did not book."""

    def __init__(self, response: BookingResponse):
        super().__init__(f"booking was not successful: agendou={response.booked}")
        self.response = response


class SchedulingFailed(RuntimeError):
    """A run-level condition that aborts the whole scheduling run."""
