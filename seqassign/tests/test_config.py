#!/usr/bin/env python3
"""
Tests for configuration loading and error handling helpers.
"""

import pytest

from seqassign.config import ConfigManager, ConfigSchema, DEFAULT_CONFIG
from seqassign.config.manager import coerce_env_value, env_overrides, local_config_path
from seqassign.error_handlers import format_error, handle_exceptions
from seqassign.exceptions import ConfigurationError, ParseError, ValidationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove SEQASSIGN_ variables inherited from the shell"""
    import os
    for key in list(os.environ):
        if key.startswith(ConfigManager.ENV_PREFIX):
            monkeypatch.delenv(key)


@pytest.mark.unit
class TestConfigManager:
    """Tests for ConfigManager"""

    def test_defaults(self):
        config = ConfigManager()
        assert config.errors == []
        assert config.get('classification.lowscore') == 0.3
        assert config.get('search.min_bitscore') == 50.0
        assert config.get_path('output_dir') == './output'

    def test_defaults_are_not_shared(self):
        config = ConfigManager()
        config.config['classification']['lowscore'] = 0.9
        assert DEFAULT_CONFIG['classification']['lowscore'] == 0.3

    def test_yaml_file_overrides(self, write_file):
        path = write_file("config.yml", """\
            classification:
              lowscore: 0.4
            alignment:
              overhang: 50
            """)
        config = ConfigManager(path)
        assert config.get('classification.lowscore') == 0.4
        assert config.get('classification.verylowscore') == 0.2
        assert config.get('alignment.overhang') == 50

    def test_local_config_is_merged(self, write_file):
        path = write_file("config.yml", "alignment:\n  overhang: 50\n")
        write_file("config.local.yml", "alignment:\n  overhang: 75\n")
        assert ConfigManager(path).get('alignment.overhang') == 75

    def test_json_file(self, write_file):
        path = write_file("config.json", '{"search": {"min_bitscore": 10}}')
        assert ConfigManager(path).get('search.min_bitscore') == 10

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / "absent.yml"))
        assert config.get('classification.lowdiff') == 0.06

    def test_non_mapping_file(self, write_file):
        path = write_file("config.yml", "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_unparseable_file(self, write_file):
        path = write_file("config.yml", "classification: [unclosed\n")
        with pytest.raises(ConfigurationError):
            ConfigManager(path)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEQASSIGN_CLASSIFICATION__LOWSCORE", "0.35")
        monkeypatch.setenv("SEQASSIGN_CLASSIFICATION__ALLOW_LOWDIFF", "yes")
        monkeypatch.setenv("SEQASSIGN_ALIGNMENT__OVERHANG", "20")
        config = ConfigManager()
        assert config.get('classification.lowscore') == 0.35
        assert config.get('classification.allow_lowdiff') is True
        assert config.get('alignment.overhang') == 20

    def test_type_errors_are_collected(self, write_file):
        path = write_file("config.yml", """\
            classification:
              lowscore: high
              allow_lowscore: 1
            """)
        errors = ConfigManager(path).errors
        assert any("classification.lowscore" in e for e in errors)
        assert any("classification.allow_lowscore" in e for e in errors)

    def test_explicit_environment(self):
        config = ConfigManager(environ={"SEQASSIGN_SEARCH__MIN_BITSCORE": "25", "HOME": "/root"})
        assert config.get('search.min_bitscore') == 25
        assert config.sources == ['defaults', 'environment']

    def test_get_missing_key(self):
        config = ConfigManager()
        assert config.get('classification.nothing', 'fallback') == 'fallback'
        assert config.get_section('nothing') == {}


@pytest.mark.unit
class TestConfigSchema:
    """Tests for ConfigSchema.validate"""

    def test_bool_is_not_numeric(self):
        config = {**DEFAULT_CONFIG, 'search': {'min_bitscore': True}}
        errors = ConfigSchema.validate(config)
        assert errors == ["Invalid type for search.min_bitscore: expected int or float, got bool"]

    def test_missing_required_field(self):
        config = {**DEFAULT_CONFIG, 'alignment': {}}
        assert "Missing required configuration field: alignment.overhang" in ConfigSchema.validate(config)

    def test_section_must_be_mapping(self):
        config = {**DEFAULT_CONFIG, 'classification': 3}
        assert ConfigSchema.validate(config) == ["Configuration section classification must be a mapping"]

    def test_fraction_bounds(self):
        config = {**DEFAULT_CONFIG, 'classification': {**DEFAULT_CONFIG['classification'], 'highbias': 1.5}}
        assert ConfigSchema.validate(config) == ["Value of classification.highbias must be at most 1.0, got 1.5"]

    def test_negative_overhang(self):
        config = {**DEFAULT_CONFIG, 'alignment': {'overhang': -1}}
        assert ConfigSchema.validate(config) == ["Value of alignment.overhang must be at least 0, got -1"]

    def test_log_level_choices(self):
        config = {**DEFAULT_CONFIG, 'logging': {'level': 'debug'}}
        assert ConfigSchema.validate(config) == []
        config['logging'] = {'level': 'chatty'}
        assert len(ConfigSchema.validate(config)) == 1


@pytest.mark.unit
class TestErrorHandlers:
    """Tests for handle_exceptions and format_error"""

    def test_success_passes_through(self):
        @handle_exceptions()
        def succeed():
            return 0
        assert succeed() == 0

    def test_package_error_returns_1(self, capsys):
        @handle_exceptions()
        def fail():
            raise ValidationError("bad input")
        assert fail() == 1
        assert "ValidationError: bad input" in capsys.readouterr().err

    def test_unexpected_error_returns_2(self, capsys):
        @handle_exceptions()
        def crash():
            raise RuntimeError("boom")
        assert crash() == 2
        assert "Unexpected Error: boom" in capsys.readouterr().err

    def test_interrupt_returns_130(self):
        @handle_exceptions()
        def interrupted():
            raise KeyboardInterrupt
        assert interrupted() == 130

    def test_exit_on_error(self):
        @handle_exceptions(exit_on_error=True)
        def fail():
            raise ConfigurationError("bad config")
        with pytest.raises(SystemExit) as exc_info:
            fail()
        assert exc_info.value.code == 1

    def test_format_verbose_details(self):
        error = ParseError("Bad line", line_number=4, line="HSP x")
        text = format_error(error, verbose=True)
        assert text.startswith("ParseError: Bad line (line 4: 'HSP x')")
        assert "'line_number': 4" in text


@pytest.mark.unit
class TestConfigHelpers:
    """Tests for the configuration helper functions"""

    def test_local_config_path(self):
        assert local_config_path("/etc/seqassign/thresholds.yml") == "/etc/seqassign/thresholds.local.yml"

    @pytest.mark.parametrize("raw, expected", [
        ("yes", True), ("Off", False), ("12", 12), ("0.5", 0.5), ("modelA", "modelA"),
    ])
    def test_coerce_env_value(self, raw, expected):
        assert coerce_env_value(raw) == expected

    def test_env_overrides_nest_on_double_underscore(self):
        overrides = env_overrides({"APP_A__B": "1", "APP_C": "x", "OTHER": "y"}, "APP_")
        assert overrides == {'a': {'b': 1}, 'c': 'x'}
