class LyraError(Exception):
    """Base exception class for the Lyra tutoring backend."""
    pass

class ConfigError(LyraError):
    """Raised when the model catalogue or another configuration file is invalid."""
    pass

class ConfigurationError(LyraError):
    """Raised when the credential for the selected provider is not configured."""
    pass

class UpstreamError(LyraError):
    """Raised when a provider answers with a non-success status or cannot be reached."""

    def __init__(self, provider: str, status_code: int, body: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"{provider} request failed with status {status_code}: {body}")

class EmptyResultError(LyraError):
    """Raised when a provider produced no usable text."""
    pass

class ChatValidationError(LyraError):
    """Raised when a chat request is missing identity, subject or content."""
    pass

class StoreError(LyraError):
    """Raised when a read or write against the document store fails."""
    pass
