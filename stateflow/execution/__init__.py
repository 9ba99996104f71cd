"""Node execution: one outbound HTTP call per run."""

from stateflow.execution.node_runner import (
    DEFAULT_TIMEOUT,
    NodeRunner,
    NodeRunResult,
    compose_url,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "NodeRunner",
    "NodeRunResult",
    "compose_url",
]
