"""Tests for startup configuration precedence and validation."""
import argparse

import pytest

from args import parse_args
from cli_config import ConfigError, apply_runtime_overrides, load_server_config
from constants import Constants


def test_defaults_are_stdio():
    config = load_server_config(parse_args([]), environ={})
    assert config.transport == "stdio"
    assert config.port == Constants.DEFAULT_PORT
    assert config.serves_stdio and not config.serves_http


def test_environment_selects_transport_and_port():
    env = {"NPM_CONTEXT_TRANSPORT": "both", "NPM_CONTEXT_PORT": "8080"}
    config = load_server_config(parse_args([]), environ=env)
    assert config.serves_stdio and config.serves_http
    assert config.port == 8080


def test_cli_wins_over_environment():
    env = {"NPM_CONTEXT_TRANSPORT": "both", "NPM_CONTEXT_PORT": "8080"}
    config = load_server_config(parse_args(["--transport", "http", "--port", "9000"]), environ=env)
    assert config.transport == "http"
    assert config.port == 9000


@pytest.mark.parametrize("env", [{"NPM_CONTEXT_TRANSPORT": "carrier-pigeon"}, {"NPM_CONTEXT_PORT": "abc"}, {"NPM_CONTEXT_PORT": "70000"}])
def test_invalid_settings_raise(env):
    with pytest.raises(ConfigError):
        load_server_config(parse_args([]), environ=env)


def test_runtime_overrides(monkeypatch):
    monkeypatch.setattr(Constants, "REQUEST_TIMEOUT", Constants.REQUEST_TIMEOUT)
    monkeypatch.setattr(Constants, "REGISTRY_URL_NPM", Constants.REGISTRY_URL_NPM)
    apply_runtime_overrides(parse_args(["--request-timeout", "5", "--registry-url", "https://npm.example.test/"]))
    assert Constants.REQUEST_TIMEOUT == 5
    assert Constants.REGISTRY_URL_NPM == "https://npm.example.test"


def test_non_positive_timeout_rejected():
    with pytest.raises(ConfigError):
        apply_runtime_overrides(argparse.Namespace(REQUEST_TIMEOUT=0, REGISTRY_URL=None))
