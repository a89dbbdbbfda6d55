import json
import os
import tempfile

import pytest

from waixg.waixg_config import ConfigError, Settings, load_settings
from waixg.waixg_eval import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT


def write_json(content: str) -> str:
    with tempfile.NamedTemporaryFile("w+", delete=False, suffix=".json") as tmp:
        tmp.write(content)
        return tmp.name


def test_defaults() -> None:
    settings = Settings()
    assert settings.max_depth == DEFAULT_MAX_DEPTH
    assert settings.prompt == ">> "
    assert settings.continuation_prompt == ".. "
    assert settings.verbose is False
    assert settings.trace is False


def test_from_mapping_basic() -> None:
    settings = Settings.from_mapping({"max_depth": 50, "prompt": "w> ", "verbose": True})
    assert settings.max_depth == 50
    assert settings.prompt == "w> "
    assert settings.verbose is True
    assert settings.trace is False


def test_from_mapping_layers_on_base() -> None:
    base = Settings(prompt="base> ", trace=True)
    settings = Settings.from_mapping({"max_depth": 7}, base)
    assert settings.prompt == "base> "
    assert settings.trace is True
    assert settings.max_depth == 7


def test_from_mapping_unknown_key_raises() -> None:
    with pytest.raises(ConfigError, match="unknown setting"):
        Settings.from_mapping({"colour": "blue"})


def test_from_mapping_rejects_bool_for_int() -> None:
    with pytest.raises(ConfigError) as e:
        Settings.from_mapping({"max_depth": True})
    assert e.value.problems == ["max_depth: expected int, got bool"]


def test_from_mapping_non_positive_depth_raises() -> None:
    with pytest.raises(ConfigError, match="must be positive"):
        Settings.from_mapping({"max_depth": 0})


def test_from_mapping_depth_above_limit_raises() -> None:
    with pytest.raises(ConfigError) as e:
        Settings.from_mapping({"max_depth": MAX_DEPTH_LIMIT + 1})
    assert e.value.problems == [
        f"max_depth: must be at most {MAX_DEPTH_LIMIT}, got {MAX_DEPTH_LIMIT + 1}"
    ]
    assert Settings.from_mapping({"max_depth": MAX_DEPTH_LIMIT}).max_depth == MAX_DEPTH_LIMIT


def test_env_depth_above_limit_raises() -> None:
    with pytest.raises(ConfigError, match="must be at most"):
        load_settings(env={"WAIXG_MAX_DEPTH": "100000"})


def test_from_mapping_reports_every_problem() -> None:
    with pytest.raises(ConfigError) as e:
        Settings.from_mapping({"prompt": 3, "verbose": "yes", "nope": 1})
    assert len(e.value.problems) == 3
    assert "prompt: expected str, got int" in str(e.value)
    assert "verbose: expected bool, got str" in str(e.value)


def test_from_mapping_requires_object() -> None:
    with pytest.raises(ConfigError, match="must be a JSON object"):
        Settings.from_mapping([1, 2])  # type: ignore[arg-type]


def test_settings_are_immutable() -> None:
    with pytest.raises(AttributeError):
        Settings().max_depth = 3  # type: ignore[misc]


def test_load_from_json_success() -> None:
    tmp_path = write_json(json.dumps({"max_depth": 500, "prompt": "waixg> "}))
    try:
        settings = Settings.load_from_json(tmp_path)
        assert settings.max_depth == 500
        assert settings.prompt == "waixg> "
    finally:
        os.remove(tmp_path)


def test_load_from_json_corrupt_file_raises() -> None:
    tmp_path = write_json("{{{ this is not json }}}")
    try:
        with pytest.raises(ConfigError, match="Failed to load config file"):
            Settings.load_from_json(tmp_path)
    finally:
        os.remove(tmp_path)


def test_load_from_json_missing_file_raises() -> None:
    with pytest.raises(ConfigError, match="Failed to load config file"):
        Settings.load_from_json("/nonexistent/waixg.json")


def test_load_settings_without_sources() -> None:
    assert load_settings(env={}) == Settings()


def test_load_settings_env_overrides_file() -> None:
    tmp_path = write_json(json.dumps({"max_depth": 500, "verbose": True}))
    try:
        settings = load_settings(
            env={"WAIXG_CONFIG": tmp_path, "WAIXG_MAX_DEPTH": " 42 ", "WAIXG_VERBOSE": "off"}
        )
        assert settings.max_depth == 42
        assert settings.verbose is False
    finally:
        os.remove(tmp_path)


def test_load_settings_explicit_path_wins_over_env_path() -> None:
    explicit = write_json(json.dumps({"prompt": "a> "}))
    from_env = write_json(json.dumps({"prompt": "b> "}))
    try:
        settings = load_settings(explicit, env={"WAIXG_CONFIG": from_env})
        assert settings.prompt == "a> "
    finally:
        os.remove(explicit)
        os.remove(from_env)


@pytest.mark.parametrize("raw", ["1", "true", "YES", "on"])
def test_env_trace_true(raw: str) -> None:
    assert load_settings(env={"WAIXG_TRACE": raw}).trace is True


@pytest.mark.parametrize(
    "env,match",
    [
        ({"WAIXG_MAX_DEPTH": "deep"}, "expected an integer"),
        ({"WAIXG_MAX_DEPTH": "0"}, "must be positive"),
        ({"WAIXG_VERBOSE": "maybe"}, "expected a boolean"),
    ],
)
def test_env_invalid_values_raise(env: dict[str, str], match: str) -> None:
    with pytest.raises(ConfigError, match=match):
        load_settings(env=env)


def test_config_error_str_without_problems() -> None:
    assert str(ConfigError("plain")) == "plain"
    assert str(ConfigError("bad", ["a", "b"])) == "bad: a; b"
