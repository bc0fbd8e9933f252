"""Error types raised by the narration pipeline stages."""


class NarratorError(RuntimeError):
    """Base class for failures inside a narration cycle."""


class CaptureError(NarratorError):
    """Browser launch, navigation or screenshot failed."""


class CommentaryError(NarratorError):
    """The multimodal completion call failed or returned no text."""


class SynthesisError(NarratorError):
    """The speech endpoint failed or the audio could not be written."""


class PlaybackError(NarratorError):
    """The audio player could not be started or exited non-zero."""
