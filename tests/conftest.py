"""Shared pytest fixtures."""

from datetime import datetime, timezone

import pytest

from topicpilot.tree import TopicTree, resolve


def at_minute(minute: int) -> datetime:
    return datetime(2024, 1, 1, 0, minute, tzinfo=timezone.utc)


@pytest.fixture
def sample_tree() -> TopicTree:
    """
    home
      bedroom
        lamp      OFF, ON, OFF, ON (retained)
        sensor    22.5
      kitchen
        fridge    4.1
        light     ON
    devices
      /sensor     x
    """
    tree = TopicTree()

    for minute, state in enumerate(["OFF", "ON", "OFF", "ON"]):
        tree.publish("home/bedroom/lamp", state, retained=True, received_at=at_minute(minute))

    tree.publish("home/bedroom/sensor", "22.5", received_at=at_minute(5))
    tree.publish("home/kitchen/fridge", "4.1", received_at=at_minute(6))
    tree.publish("home/kitchen/light", "ON", received_at=at_minute(7))
    tree.publish(["devices", "/sensor"], "x", received_at=at_minute(8))

    return tree


@pytest.fixture
def root(sample_tree):
    return sample_tree.root


@pytest.fixture
def lamp(sample_tree):
    return resolve("home/bedroom/lamp", sample_tree.root)
