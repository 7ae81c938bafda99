"""Shared fixtures"""

import pytest

from retry_timeouts.application.simulator import VirtualClock


@pytest.fixture
def clock():
    """Virtual clock starting at t=0"""
    return VirtualClock()
