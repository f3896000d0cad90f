"""Error taxonomy shared by the correlation services and the HTTP layer."""


class ColdChainError(Exception):
    """Base error for cold chain telemetry services."""
    pass


class UpstreamReadFailure(ColdChainError):
    """A read against the telemetry store failed."""

    def __init__(self, read: str, message: str):
        super().__init__(f"{read}: {message}")
        self.read = read
        self.message = message


class MissingRequiredIdentifier(ColdChainError):
    """No device identifier was supplied where one is required."""
    pass


class EmptyReportWindow(ColdChainError):
    """No telemetry exists for the requested report window."""

    MESSAGE = "Nenhum dado encontrado para este período."

    def __init__(self, device_id: str):
        super().__init__(self.MESSAGE)
        self.device_id = device_id
