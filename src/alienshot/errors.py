"""
Error taxonomy for photo processing jobs.

InputError aborts a whole job. FilterError and OutputError are confined to
one filter look. RelocationWarning is only logged and reported.
"""

from pathlib import Path


class AlienshotError(Exception):
    """Base class for alienshot errors."""


class InputError(AlienshotError):
    """The source file cannot be processed at all."""

    MISSING_PATH = "missing path"
    NOT_FOUND = "not found"
    INCOMPLETE_TRANSFER = "incomplete transfer"
    DECODE_FAILURE = "decode failure"

    KINDS = (MISSING_PATH, NOT_FOUND, INCOMPLETE_TRANSFER, DECODE_FAILURE)

    def __init__(self, kind: str, path: str | Path | None = None, detail: str = ""):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown input error kind: {kind}")
        self.kind = kind
        self.path = path
        self.detail = detail
        message = kind if path is None else f"{kind}: {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class FilterError(AlienshotError):
    """A filter look failed or produced an invalid result."""

    def __init__(self, variant: str, cause: BaseException | str):
        self.variant = variant
        self.cause = cause
        super().__init__(f"{variant} filter failed: {cause}")


class OutputError(AlienshotError):
    """Encoding or writing a filtered image failed."""

    def __init__(self, variant: str, path: str | Path, detail: str = ""):
        self.variant = variant
        self.path = path
        self.detail = detail
        message = f"could not write {variant} output to {path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RelocationWarning(UserWarning):
    """The original could not be moved to the archive after a successful job."""

    def __init__(self, source: str | Path, destination: str | Path, detail: str = ""):
        self.source = source
        self.destination = destination
        self.detail = detail
        message = f"could not move {source} to {destination}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
