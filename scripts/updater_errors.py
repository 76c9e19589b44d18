#!/usr/bin/env python3
"""
Updater Error Types
Every fatal condition of the Hytale launcher updater maps to one of these.
"""


class UpdaterError(Exception):
    """Base class for errors that abort an updater run with exit code 1"""


class ArgError(UpdaterError):
    """Unknown or malformed command-line flag"""


class PreconditionError(UpdaterError):
    """Missing external tool, wrong working directory or unreadable package file"""


class FetchError(UpdaterError):
    """Upstream manifest could not be downloaded"""


class ParseError(UpdaterError):
    """Upstream manifest lacks an expected field"""


class ConversionError(UpdaterError):
    """Hex digest could not be converted to an SRI hash"""


class BuildVerificationError(UpdaterError):
    """Package no longer builds after the update was applied"""

    def __init__(self, message: str, log: str = ""):
        super().__init__(message)
        self.log = log


class PackageFileError(UpdaterError):
    """Package file or its backup could not be written, replaced or removed"""
