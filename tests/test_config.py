#!/usr/bin/env python3
"""Tests for environment settings and store selection."""

from pathlib import Path

from servicelog import FirebaseStore, YamlStore
from servicelog.config import DEFAULT_SHOP_NAME, DEFAULT_STORE_PATH, Settings, build_store


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.store_url is None
        assert settings.store_path == DEFAULT_STORE_PATH
        assert settings.store_timeout == 10
        assert settings.shop_name == DEFAULT_SHOP_NAME
        assert settings.log_level == "INFO"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "SECRET_KEY": "s3cret",
            "SERVICE_STORE_URL": "https://garage.firebaseio.com",
            "SERVICE_STORE_AUTH": "token",
            "SERVICE_STORE_TIMEOUT": "2.5",
            "SERVICE_STORE_PATH": "/tmp/services.yaml",
            "SHOP_NAME": "Corner Garage",
            "LOG_LEVEL": "DEBUG",
        })
        assert settings.secret_key == "s3cret"
        assert settings.store_url == "https://garage.firebaseio.com"
        assert settings.store_auth == "token"
        assert settings.store_timeout == 2.5
        assert settings.store_path == Path("/tmp/services.yaml")
        assert settings.shop_name == "Corner Garage"
        assert settings.log_level == "DEBUG"


class TestBuildStore:
    """Tests for build_store."""

    def test_yaml_by_default(self, tmp_path):
        store = build_store(Settings(store_path=tmp_path / "services.yaml"))
        assert isinstance(store, YamlStore)
        assert store.filename == tmp_path / "services.yaml"

    def test_firebase_when_url_set(self):
        store = build_store(Settings(store_url="https://garage.firebaseio.com/", store_auth="t"))
        assert isinstance(store, FirebaseStore)
        assert store.database_url == "https://garage.firebaseio.com"
        assert store.auth == "t"
