"""Startup errors. Anything raised here stops the process."""


class LatencyDemoError(Exception):
    pass


class ProjectIDNotFoundError(LatencyDemoError):
    def __init__(self, message: str = "Specify GCP Project ID in $GCP_PROJECT_ID"):
        super().__init__(message)


class ExporterInitError(LatencyDemoError):
    pass
