class GenerationError(Exception):
    """Raised when text generation fails."""


class UpstreamError(GenerationError):
    """Raised when the text-generation API call fails or returns a malformed payload."""


class PromptLoadError(GenerationError):
    """Raised when a prompt fragment cannot be loaded."""
