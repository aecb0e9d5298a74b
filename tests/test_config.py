# ==============================================
# Tests for Configuration
# ==============================================

import os
from unittest import mock

import pytest

from tiered_storage.analysis.decision import AccessibilityLevel
from tiered_storage.config import AppConfig, DurableConfig, VolatileConfig, get_config

ENV_VARS = [
    "STORAGE_SERVICE_NAME",
    "STORAGE_DEFAULT_ACCESSIBILITY",
    "STORAGE_ENABLE_STATISTICS",
    "VOLATILE_BACKEND",
    "VOLATILE_FILE_PATH",
    "DURABLE_BACKEND",
    "DURABLE_MAX_ITEM_BYTES",
    "MONGO_HOST",
    "MONGO_PORT",
    "MONGO_USER",
    "MONGO_PASSWORD",
    "MONGO_DATABASE",
    "MONGO_COLLECTION",
    "MYSQL_HOST",
    "MYSQL_PORT",
    "MYSQL_USER",
    "MYSQL_PASSWORD",
    "MYSQL_DATABASE",
    "MYSQL_TABLE",
]


@pytest.fixture
def clean_env():
    """Isolate os.environ; load_dotenv writes into it."""
    with mock.patch.dict(os.environ):
        for name in ENV_VARS:
            os.environ.pop(name, None)
        yield


class TestGetConfig:
    def test_defaults(self, clean_env, tmp_path):
        config = get_config(str(tmp_path / "missing.env"))
        assert config.service_name == "tiered_storage"
        assert config.default_accessibility is AccessibilityLevel.WHEN_UNLOCKED
        assert config.enable_statistics is True
        assert config.volatile.backend == "memory"
        assert config.durable.backend == "memory"
        assert config.durable.max_item_bytes == 16 * 1024
        assert config.mysql.port == 3306
        assert config.mongo.user is None

    def test_reads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "STORAGE_SERVICE_NAME=com.example.app\n"
            "STORAGE_DEFAULT_ACCESSIBILITY=AFTER_FIRST_UNLOCK\n"
            "STORAGE_ENABLE_STATISTICS=false\n"
            "VOLATILE_BACKEND=File\n"
            "VOLATILE_FILE_PATH=/tmp/prefs.json\n"
            "DURABLE_BACKEND=mysql\n"
            "DURABLE_MAX_ITEM_BYTES=4096\n"
            "MYSQL_PORT=3307\n"
            "MYSQL_TABLE=secrets\n"
            "MONGO_USER=app\n",
            encoding="utf-8",
        )
        config = get_config(str(env_file))
        assert config.service_name == "com.example.app"
        assert config.default_accessibility is AccessibilityLevel.AFTER_FIRST_UNLOCK
        assert config.enable_statistics is False
        assert config.volatile.backend == "file"
        assert config.volatile.file_path == "/tmp/prefs.json"
        assert config.durable.backend == "mysql"
        assert config.durable.max_item_bytes == 4096
        assert config.mysql.port == 3307
        assert config.mysql.table == "secrets"
        assert config.mongo.user == "app"

    def test_environment_wins_over_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("STORAGE_SERVICE_NAME=from_file\n", encoding="utf-8")
        os.environ["STORAGE_SERVICE_NAME"] = "from_env"
        assert get_config(str(env_file)).service_name == "from_env"

    def test_fresh_instance_each_call(self, clean_env, tmp_path):
        path = str(tmp_path / "missing.env")
        assert get_config(path) is not get_config(path)

    def test_unknown_accessibility(self, clean_env, tmp_path):
        os.environ["STORAGE_DEFAULT_ACCESSIBILITY"] = "sometimes"
        with pytest.raises(ValueError):
            get_config(str(tmp_path / "missing.env"))


class TestAppConfigValidation:
    def test_unknown_volatile_backend(self):
        with pytest.raises(ValueError, match="volatile backend"):
            AppConfig(volatile=VolatileConfig(backend="redis"))

    def test_unknown_durable_backend(self):
        with pytest.raises(ValueError, match="durable backend"):
            AppConfig(durable=DurableConfig(backend="mongo"))

    def test_item_limit_positive(self):
        with pytest.raises(ValueError):
            AppConfig(durable=DurableConfig(max_item_bytes=0))
