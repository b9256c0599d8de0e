"""Error taxonomy shared by the validator, resolvers and delivery pipeline.

Every error carries the HTTP status it maps to and a message that is safe to
show to the user. Library exceptions are converted into one of these at the
component boundary and never reach the client as raw strings.
"""
from typing import Optional


class VidRelayError(Exception):
    """Base class for all user-facing errors"""

    status_code = 400
    default_message = "Request failed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Client input errors

class ValidationError(VidRelayError):
    """The submitted URL or parameters were rejected before any network call"""


class InvalidFormatError(ValidationError):
    default_message = "Invalid URL format."


class UnsupportedHostError(ValidationError):
    default_message = "Unsupported link. Supported platforms: YouTube, Reddit, X (Twitter)."


class InvalidPlatformPathError(ValidationError):
    default_message = "This link does not point to a video."


class InvalidDownloadTypeError(ValidationError):
    default_message = "Unsupported download type. Use mp4 or mp3."


# Domain errors raised by resolvers

class ResolutionError(VidRelayError):
    """A resolver could not produce metadata or a direct source"""


class UpstreamUnavailableError(ResolutionError):
    default_message = (
        "Failed to fetch video information. "
        "The video may be unavailable or unsupported."
    )


class NoVideoFoundError(ResolutionError):
    default_message = "Could not find a video at this link."


class CapabilityNotImplementedError(ResolutionError):
    default_message = "Downloading from this platform is not supported yet."


class FormatNoLongerAvailableError(ResolutionError):
    default_message = (
        "The selected format is no longer available. "
        "Please inspect the link again and pick another format."
    )


# Server-side failures

class DeliveryError(VidRelayError):
    status_code = 500


class TranscodeFailureError(DeliveryError):
    default_message = "Conversion failed."


class UnexpectedInternalError(DeliveryError):
    default_message = "Unexpected server error. Please try again later."
