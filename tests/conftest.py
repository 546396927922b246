"""
Pytest Configuration for Fleet Dashboard Tests

Fixtures live in tests/fixtures and are star-imported here so every test
module can use them.
"""

import os

# Keep the lifespan quiet and the tests off the real Docker daemon
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("MONITOR_DOCKER_ENABLED", "false")

import pytest

from tests.fixtures.api_fixtures import *  # noqa
from tests.fixtures.fleet_fixtures import *  # noqa
from tests.fixtures.storage_fixtures import *  # noqa
