"""Shared fixtures."""

from __future__ import annotations

import pytest
from fakes import FakeChat

from chatshell.chat.models import ChatDestination


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def channel() -> ChatDestination:
    return ChatDestination(channel="C123", shared=True)


@pytest.fixture
def direct() -> ChatDestination:
    return ChatDestination(channel="U42", shared=False)
