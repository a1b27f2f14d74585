class SentimentError(Exception):
    """Base error kind; maps to a status code and a `{'message': ...}` body."""
    status_code = 500

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_body(self) -> dict:
        text = ' '.join(p for p in (self.message, self.hint) if p)
        return {'message': text}


class ValidationError(SentimentError):
    """Bad URL or bad request shape; the user can fix it."""
    status_code = 400

class UpstreamTimeout(SentimentError):
    status_code = 503

class UpstreamUnavailable(SentimentError):
    status_code = 503

class UpstreamTransportError(SentimentError):
    status_code = 500

class UpstreamProtocolError(SentimentError):
    """Unexpected upstream status, payload or API code."""
    status_code = 500
