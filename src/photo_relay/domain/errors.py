"""Error types shared by services and adapters."""


class PhotoRelayError(Exception):
    """Base error for the photo relay."""


class ResourceResolutionError(PhotoRelayError):
    """Raised when a downloadable link cannot be obtained for a photo."""

    def __init__(self, file_id: str, reason: str) -> None:
        super().__init__(f"Could not resolve file {file_id}: {reason}")
        self.file_id = file_id
        self.reason = reason


class DeliveryError(PhotoRelayError):
    """Raised when downloading or emailing a photo fails."""
