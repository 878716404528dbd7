"""Tests for the live session registry."""

import pytest

from broker_agent.core.exceptions import SessionNotFound
from broker_agent.services.agent.registry import SessionRegistry


def test_create_and_get(registry, tenant):
    session = registry.create(tenant)

    assert registry.get(session.id) is session
    assert session.tenant is tenant
    assert not session.is_started


def test_get_unknown_session(registry):
    with pytest.raises(SessionNotFound):
        registry.get("missing")


def test_discard(registry, tenant):
    session = registry.create(tenant)

    assert registry.discard(session.id) is True
    assert registry.discard(session.id) is False
    assert len(registry) == 0


def test_oldest_sessions_evicted(test_settings, chat_model, tenant):
    registry = SessionRegistry(
        config=test_settings.model_copy(update={"max_live_sessions": 2}),
        chat_model=chat_model,
    )

    first = registry.create(tenant)
    second = registry.create(tenant)
    third = registry.create(tenant)

    assert len(registry) == 2
    with pytest.raises(SessionNotFound):
        registry.get(first.id)
    assert registry.get(second.id) is second
    assert registry.get(third.id) is third
