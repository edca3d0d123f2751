# deal_checker/errors.py

"""Exception hierarchy for the deal_checker pipeline."""


class DealCheckerError(Exception):
    """Base class for every fatal deal_checker error."""


class ConfigurationError(DealCheckerError):
    """Missing credentials, unknown provider or missing input directory."""


class ProviderError(DealCheckerError):
    """A provider call failed at the transport or parse level."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PersistenceError(DealCheckerError):
    """Writing an output artifact failed."""


class PipelineError(DealCheckerError):
    """A fatal failure inside the orchestrator, tagged with its stage."""

    def __init__(
        self,
        stage: str,
        source: str,
        cause: BaseException,
    ) -> None:
        super().__init__(
            f"{stage} failed for {source}: {cause}"
        )
        self.stage = stage
        self.source = source
        self.cause = cause
