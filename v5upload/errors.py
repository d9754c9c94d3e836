"""Failures that abort an upload run. Each one carries the process exit code."""


class UploadError(Exception):
    exit_code = 1


class ConversionFailure(UploadError):
    """objcopy could not turn the executable into a flat binary."""


class PersistenceFailure(UploadError):
    """The project descriptor could not be written."""


class UsageError(UploadError):
    pass


class UnrecognizedFlag(UsageError):
    def __init__(self, token, message=None):
        super().__init__(message or f"Unrecognized flag: {token}")
        self.token = token


class MissingValue(UnrecognizedFlag):
    def __init__(self, flag):
        super().__init__(flag, f"Missing value for {flag}")


class HelpRequested(UsageError):
    pass


class PortNotFound(UploadError):
    pass


class ChildProcessFailure(UploadError):
    """An external tool could not be started at all."""

    def __init__(self, cmd, reason):
        super().__init__(f"failed to execute {cmd[0]}: {reason}")
        self.cmd = cmd
