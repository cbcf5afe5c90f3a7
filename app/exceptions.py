"""Errors raised at the external call boundaries."""


class UpstreamError(Exception):
    """Transport-level failure talking to GitHub or the completion service.

    Connection refused, DNS and TLS failures, and timeouts end up here. HTTP
    error statuses and unexpected response bodies do not.
    """

    def __init__(self, service: str, operation: str, message: str):
        self.service = service
        self.operation = operation
        self.message = message
        super().__init__(f"{service} {operation} failed: {message}")
