import os

import hypothesis
import pytest

from expohisto.config import GetSettings

VALID_PRESETS = ["fast", "normal", "slow"]
CURRENT_PRESET = os.getenv("PROPERTY_TESTING_PRESET", "fast")

if CURRENT_PRESET not in VALID_PRESETS:
    raise ValueError(
        f"Invalid property testing preset: {CURRENT_PRESET}. Must be one of {VALID_PRESETS}."
    )

hypothesis.settings.register_profile(
    "base",
    # The first use of a large scale builds its table inside an example.
    deadline=None,
    suppress_health_check=[
        hypothesis.HealthCheck.too_slow,
        hypothesis.HealthCheck.function_scoped_fixture,
    ],
)
hypothesis.settings.register_profile(
    "fast", hypothesis.settings.get_profile("base"), max_examples=50
)
# Hypothesis's default max_examples is 100
hypothesis.settings.register_profile(
    "normal", hypothesis.settings.get_profile("base"), max_examples=100
)
hypothesis.settings.register_profile(
    "slow", hypothesis.settings.get_profile("base"), max_examples=500
)

hypothesis.settings.load_profile(CURRENT_PRESET)


@pytest.fixture
def settings_env(monkeypatch: pytest.MonkeyPatch):
    """Lets a test change EXPOHISTO_* variables and see them in GetSettings()."""
    GetSettings.cache_clear()
    yield monkeypatch
    monkeypatch.undo()
    GetSettings.cache_clear()
