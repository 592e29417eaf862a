"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class TransportError(AdapterError):
    """Remote call failed: network error or non-2xx response.

    Attributes:
        status: HTTP status code, None when no response was received
        body: Response body text, or the underlying error message
    """

    def __init__(self, status: int | None, body: str):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(f"API request failed: {body}")
        else:
            super().__init__(f"API request failed: {status} - {body}")


class PayloadError(AdapterError):
    """Remote call succeeded but the response had an unexpected shape."""

    pass
