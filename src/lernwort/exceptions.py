"""Exception types raised inside the sync and speech subsystems."""


class LernwortError(Exception):
    """Base class for application errors."""


class TransientRemoteError(LernwortError):
    """The remote word store could not be reached or answered with an error status."""


class GenerationExhaustedError(LernwortError):
    """Speech generation produced no audio after every attempt."""

    def __init__(self, text: str, attempts: int):
        super().__init__(f"No audio for {text!r} after {attempts} attempts")
        self.text = text
        self.attempts = attempts


class DecodeError(LernwortError):
    """Audio payload is empty or malformed."""


class UserFacingError(LernwortError):
    """Reserved for errors shown to the learner by the outer layer."""
