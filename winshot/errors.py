"""Error taxonomy. Every stage raises one of these; only the handler and
server layers turn them into response envelopes."""


class WinshotError(RuntimeError):
    code = "internal_error"


class MalformedRequestError(WinshotError):
    """Payload did not decode into a ScreenshotRequest."""
    code = "malformed_request"


class WindowNotFoundError(WinshotError):
    code = "window_not_found"


class CaptureError(WinshotError):
    """Window enumeration or pixel capture failed on the platform side."""
    code = "capture_failed"


class EncodingError(WinshotError):
    code = "encoding_failed"


class SizeBudgetExceededError(WinshotError):
    """Output is still over the hard base64 ceiling after every stage."""
    code = "size_budget_exceeded"
