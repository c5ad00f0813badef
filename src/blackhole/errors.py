"""
Error Kinds
===========

Exception hierarchy shared by every stage of the block pipeline.

Propagation rules:
    - DecodeError / FormatError abort a single file, never a directory run
    - TransformRangeError aborts the image being processed
    - NetworkError is caught inside the block store client and reported
      through result objects
    - ValidationError causes a single block to be skipped before upload
"""


class BlackholeError(Exception):
    """Base class for all pipeline errors."""
    pass


class DecodeError(BlackholeError):
    """Raised when a source image cannot be read or decoded."""
    pass


class FormatError(BlackholeError):
    """Raised when a container is malformed or cannot be encoded."""
    pass


class TransformRangeError(BlackholeError):
    """Raised when the forward color transform yields Y outside [0, 255]."""
    pass


class NetworkError(BlackholeError):
    """Raised when the remote block store cannot be reached or answers badly."""
    pass


class ValidationError(BlackholeError):
    """Raised when a block fails a structural check before upload."""
    pass
