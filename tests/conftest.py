"""Shared fixtures: recording list builders (see ``fakes.py``) and log capture."""

from collections.abc import Callable, Iterator

import pytest
from loguru import logger

from cexpr import MappingBuilder
from fakes import ListOperations


@pytest.fixture
def list_ops() -> ListOperations:
    return ListOperations()


@pytest.fixture
def make_builder(list_ops: ListOperations) -> Callable[..., MappingBuilder]:
    """Build a recording list builder from a subset of operation names."""
    return list_ops.builder


@pytest.fixture
def loguru_messages() -> Iterator[list[str]]:
    """Messages logged through loguru while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
        format="{message}",
    )
    yield messages
    logger.remove(handler_id)
