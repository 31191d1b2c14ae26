"""Tests for ReconcilerConfig."""

import pytest

from neptune_params.config import ReconcilerConfig
from neptune_params.models import DELETE_TIMEOUT_SECONDS, RESET_TIMEOUT_SECONDS


class TestReconcilerConfig:
    """Tests for ReconcilerConfig."""

    def test_defaults(self):
        config = ReconcilerConfig()
        assert config.region is None
        assert config.endpoint_url is None
        assert config.reset_timeout == RESET_TIMEOUT_SECONDS
        assert config.delete_timeout == DELETE_TIMEOUT_SECONDS
        assert config.max_params_per_call == 20

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("NEPTUNE_PARAMS_REGION", "eu-west-1")
        monkeypatch.setenv("NEPTUNE_PARAMS_ENDPOINT_URL", "http://localhost:4566")
        monkeypatch.setenv("NEPTUNE_PARAMS_RESET_TIMEOUT", "45")
        monkeypatch.setenv("NEPTUNE_PARAMS_DELETE_TIMEOUT", "600")

        config = ReconcilerConfig.from_environment()

        assert config.region == "eu-west-1"
        assert config.endpoint_url == "http://localhost:4566"
        assert config.reset_timeout == 45.0
        assert config.delete_timeout == 600.0

    def test_from_environment_defaults(self, monkeypatch):
        for var in (
            "NEPTUNE_PARAMS_REGION",
            "NEPTUNE_PARAMS_ENDPOINT_URL",
            "NEPTUNE_PARAMS_RESET_TIMEOUT",
            "NEPTUNE_PARAMS_DELETE_TIMEOUT",
        ):
            monkeypatch.delenv(var, raising=False)
        assert ReconcilerConfig.from_environment() == ReconcilerConfig()

    def test_empty_region_treated_as_unset(self, monkeypatch):
        monkeypatch.setenv("NEPTUNE_PARAMS_REGION", "")
        assert ReconcilerConfig.from_environment().region is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"reset_timeout": -1},
            {"delete_timeout": -0.5},
            {"max_params_per_call": 0},
            {"max_params_per_call": 21},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            ReconcilerConfig(**kwargs)

    def test_client_kwargs(self):
        assert ReconcilerConfig().client_kwargs() == {}
        config = ReconcilerConfig(region="us-east-1", endpoint_url="http://localhost:4566")
        assert config.client_kwargs() == {
            "region_name": "us-east-1",
            "endpoint_url": "http://localhost:4566",
        }
