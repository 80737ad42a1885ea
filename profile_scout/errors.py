"""Failure taxonomy for the discovery pipeline.

Only ``ExhaustedRetries`` is ever raised past a stage boundary. The stage-level
failures are records: each stage builds one at the point where it degrades to
its fallback, logs it, and reports it as an activity.
"""
from __future__ import annotations


class TransientProviderError(Exception):
    """A model provider call failed or returned output that did not validate."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ExhaustedRetries(Exception):
    """The invoker ran out of attempts; ``last_error`` is the final failure."""

    def __init__(self, caller: str, attempts: int, last_error: BaseException | None):
        detail = str(last_error) if last_error else "unknown error"
        super().__init__(f"{caller} failed after {attempts} attempts: {detail}")
        self.caller = caller
        self.attempts = attempts
        self.last_error = last_error


class StageFailure(Exception):
    """Base for failures a stage absorbs instead of propagating."""

    context = "Stage"

    def __init__(self, cause: BaseException, subject: str = ""):
        self.cause = cause
        self.subject = subject
        super().__init__(self.describe())

    def describe(self) -> str:
        detail = str(self.cause) or type(self.cause).__name__
        return f"{self.context} failed: {detail}"


class PlanningFailure(StageFailure):
    context = "Search planning"


class QueryFailure(StageFailure):
    @property
    def context(self) -> str:  # type: ignore[override]
        return f"Searching for {self.subject}"


class ExtractionFailure(StageFailure):
    @property
    def context(self) -> str:  # type: ignore[override]
        return f"Account extraction from {self.subject}"


class AnalysisFailure(StageFailure):
    context = "Results analysis"
