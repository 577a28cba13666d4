"""Nested contracts and required-contract prerequisites.

``contract("batch", "nightly")`` configures ``nightly`` only for the case where
``batch`` was declared before it. Other contracts may be declared in between,
but the order matters.
"""

from __future__ import annotations

from typing import Annotated

from contractwire import Container, ContainerConfigurationBuilder, RequireContract


class RetryPolicy:
    def __init__(self, attempts: int) -> None:
        self.attempts = attempts


class Job:
    def __init__(self, retry: Annotated[RetryPolicy, RequireContract("nightly")]) -> None:
        self.retry = retry


TYPES = [RetryPolicy, Job]


def main() -> None:
    builder = ContainerConfigurationBuilder()
    builder.for_type(RetryPolicy).dependencies(attempts=1)
    builder.contract("batch", "nightly").for_type(RetryPolicy).dependencies(attempts=5)
    container = Container(builder.build(TYPES), TYPES)

    default = container.get(RetryPolicy)
    nested = container.get(RetryPolicy, "batch", "eu", "nightly")
    reversed_order = container.get(RetryPolicy, "nightly", "batch")

    print(f"default={default.attempts}")  # => default=1
    print(f"nested={nested.attempts}")  # => nested=5
    print(f"reversed_order={reversed_order.attempts}")  # => reversed_order=1

    job = container.get(Job, "batch")
    print(f"job_attempts={job.retry.attempts}")  # => job_attempts=5

    log = container.resolve(Job, ["batch"]).construction_log()
    print(f"log={log!r}")  # => log='Job[batch]\n\tRetryPolicy[batch->nightly]\n\t\tattempts -> 5'


if __name__ == "__main__":
    main()
