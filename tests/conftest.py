"""Shared pytest fixtures for contractwire tests."""

from collections.abc import Callable, Iterable
from typing import Any, Protocol

import pytest

from contractwire import Container, ContainerConfigurationBuilder, LockMode


class ContainerFactory(Protocol):
    def __call__(
        self,
        types: Iterable[type[Any]],
        configure: Callable[[ContainerConfigurationBuilder], object] | None = None,
        *,
        lock_mode: LockMode = LockMode.THREAD,
    ) -> Container: ...


@pytest.fixture()
def make_container() -> ContainerFactory:
    """Build a container over candidate types, optionally configuring it first."""

    def _make(
        types: Iterable[type[Any]],
        configure: Callable[[ContainerConfigurationBuilder], object] | None = None,
        *,
        lock_mode: LockMode = LockMode.THREAD,
    ) -> Container:
        types = list(types)
        builder = ContainerConfigurationBuilder()
        if configure is not None:
            configure(builder)
        return Container(builder.build(types), types, lock_mode=lock_mode)

    return _make
