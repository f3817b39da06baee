"""
Collector Errors

Every failure raised by the collector derives from VscodeStatError.
"""


class VscodeStatError(Exception):
    """Base class for collector errors"""


class ConfigurationError(VscodeStatError):
    """Required configuration is missing or invalid"""


class SourceFetchError(VscodeStatError):
    """The vsce command failed, timed out or wrote to stderr"""

    def __init__(self, message: str, returncode=None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedSourceOutput(VscodeStatError):
    """The vsce output could not be parsed into statistics"""


class PersistenceReadError(VscodeStatError):
    """A stored CSV file exists but could not be read"""


class PersistenceWriteError(VscodeStatError):
    """A CSV file could not be written"""
