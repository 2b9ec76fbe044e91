from typing import Any


class BullscopeException(Exception):
    """
    Base class for every error raised by bullscope.
    """

    def __init__(self, detail: Any = None, *args: Any) -> None:
        self.detail = detail
        super().__init__(*((detail,) if detail is not None else ()), *args)

    def __str__(self) -> str:
        return str(self.detail) if self.detail is not None else self.__class__.__name__


class ImproperlyConfigured(BullscopeException):
    """
    The settings describe something bullscope cannot run with.
    """


class StoreError(BullscopeException):
    """
    A single store command failed (wrong key type, protocol error, ...).

    Raised for one read only. Aggregations absorb it at the smallest unit of
    work according to the configured read policy.
    """


class StoreUnavailable(StoreError):
    """
    The store cannot be reached. Always propagates to the caller.
    """


class JobNotFound(BullscopeException):
    """
    No hash record exists for the requested job.
    """

    def __init__(self, queue: str, job_id: str) -> None:
        self.queue = queue
        self.job_id = job_id
        super().__init__(f"job not found: {job_id} (queue '{queue}')")


class UnknownState(BullscopeException):
    """
    A state name that is neither a known job state nor `all`.
    """

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"unknown state: {state}")
