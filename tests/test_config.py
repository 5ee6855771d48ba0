"""Tests for configuration loading."""

import pytest


class TestLoadConfig:
    """Test cases for load_config."""

    def test_defaults(self):
        from citation_explorer.config import S2_GRAPH_API, load_config

        config = load_config({})

        assert config.api_base_url == S2_GRAPH_API
        assert config.api_key is None
        assert config.max_workers == 8
        assert config.default_depth == 2
        assert config.rate_limit_seconds == 0.0

    def test_environment_values(self):
        from citation_explorer.config import load_config

        config = load_config({
            "S2_API_KEY": " key ",
            "CITATION_EXPLORER_API_URL": "http://localhost:8000/graph/v1",
            "CITATION_EXPLORER_TIMEOUT": "5",
            "CITATION_EXPLORER_MAX_WORKERS": "2",
            "CITATION_EXPLORER_RATE_LIMIT": "0.5",
            "CITATION_EXPLORER_DEPTH": "1",
        })

        assert config.api_key == "key"
        assert config.api_base_url == "http://localhost:8000/graph/v1"
        assert config.timeout == 5.0
        assert config.max_workers == 2
        assert config.rate_limit_seconds == 0.5
        assert config.default_depth == 1

    def test_reads_os_environ(self, monkeypatch):
        from citation_explorer.config import load_config

        monkeypatch.setenv("CITATION_EXPLORER_MAX_WORKERS", "3")

        assert load_config().max_workers == 3

    @pytest.mark.parametrize("name,value", [
        ("CITATION_EXPLORER_TIMEOUT", "soon"),
        ("CITATION_EXPLORER_MAX_WORKERS", "0"),
        ("CITATION_EXPLORER_DEPTH", "-1"),
    ])
    def test_invalid_values(self, name, value):
        from citation_explorer.config import load_config
        from citation_explorer.exceptions import ConfigError

        with pytest.raises(ConfigError):
            load_config({name: value})
