import os
from typing import Any

import pytest

from waixg.waixg_config import CONFIG_ENV

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


SETTINGS_ENV_VARS = (CONFIG_ENV, "WAIXG_MAX_DEPTH", "WAIXG_VERBOSE", "WAIXG_TRACE")


@pytest.fixture(autouse=True)  # type: ignore[misc]
def isolated_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps the developer's WAIXG_* variables out of every test."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
