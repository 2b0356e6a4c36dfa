class FetchError(Exception):
    """Base for every per-job failure. Never escapes a worker."""

    kind = "fetch failed"

    def __init__(self, url, message=""):
        self.url = url
        self.message = message
        super().__init__(f"{self.kind}: {message}" if message else self.kind)


class InvalidURL(FetchError):
    kind = "invalid URL"


class RequestFailed(FetchError):
    kind = "request failed"


class TooManyRedirects(FetchError):
    kind = "too many redirects"


class ReadFailed(FetchError):
    kind = "reading response"


class WriteFailed(FetchError):
    kind = "writing artifact"
