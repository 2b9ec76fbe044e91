from enum import StrEnum


class JobState(StrEnum):
    WAITING = "waiting"
    ACTIVE = "active"
    PAUSED = "paused"
    PRIORITIZED = "prioritized"
    WAITING_CHILDREN = "waiting-children"
    FAILED = "failed"
    COMPLETED = "completed"
    DELAYED = "delayed"
    STALLED = "stalled"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return str(self.value)


class Structure(StrEnum):
    """
    The Redis data type backing a state collection.
    """

    LIST = "list"
    ZSET = "zset"
    SET = "set"

    def __str__(self) -> str:
        return str(self.value)


class ReadPolicy(StrEnum):
    """
    What a failed collection read contributes to an aggregate.
    """

    DEGRADE = "degrade"
    FAIL_FAST = "fail_fast"

    def __str__(self) -> str:
        return str(self.value)


# Pseudo state accepted by the listing operations.
ALL_STATES = "all"
