"""Tests for settings loading and log file handling."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta

from config import DEFAULT_TIMEOUT, WalletConfig, load_settings, save_settings
from networks import NETWORKS, get_network, get_network_by_name, native_decimals, native_symbol
from services.logging import LOG_FILE_PREFIX, cleanup_old_logs, configure_logging, get_log_file_path

from conftest import SEPOLIA


class TestWalletConfig:

    def test_from_settings(self, tmp_path):
        settings_path = tmp_path / "settings.json"
        save_settings({"timeout": 12, "custom_rpcs": {str(SEPOLIA): "http://custom:8545"}}, settings_path)

        config = WalletConfig.from_settings(chain_id=SEPOLIA, settings_path=settings_path)

        assert config.timeout == 12
        assert config.custom_rpcs == {SEPOLIA: "http://custom:8545"}
        assert config.resolve_rpc_url() == "http://custom:8545"

    def test_missing_settings_file(self, tmp_path):
        config = WalletConfig.from_settings(settings_path=tmp_path / "missing.json")
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.custom_rpcs == {}
        assert config.resolve_rpc_url() is None

    def test_corrupt_settings_file(self, tmp_path, caplog):
        settings_path = tmp_path / "settings.json"
        settings_path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert load_settings(settings_path) == {}
        assert "Failed to load settings" in caplog.text

    def test_save_round_trip(self, tmp_path):
        settings_path = tmp_path / "settings.json"
        save_settings({"chain_id": 8453}, settings_path)
        assert json.loads(settings_path.read_text()) == {"chain_id": 8453}
        assert WalletConfig.from_settings(settings_path=settings_path).chain_id == 8453

    def test_network_name_in_settings(self, tmp_path):
        settings_path = tmp_path / "settings.json"
        save_settings({"network": "base-sepolia"}, settings_path)
        assert WalletConfig.from_settings(settings_path=settings_path).chain_id == 84532

    def test_rpc_url_precedence(self):
        config = WalletConfig(
            chain_id=SEPOLIA,
            rpc_url="http://configured:8545",
            custom_rpcs={SEPOLIA: "http://custom:8545"},
        )
        assert config.resolve_rpc_url("http://explicit:8545") == "http://explicit:8545"
        assert config.resolve_rpc_url() == "http://configured:8545"
        assert WalletConfig(chain_id=SEPOLIA).resolve_rpc_url() == NETWORKS[SEPOLIA].rpc_url


class TestNetworks:

    def test_lookup(self):
        assert get_network(SEPOLIA).chain_id == SEPOLIA
        assert get_network(424242) is None
        assert get_network_by_name("base").chain_id == 8453

    def test_native_currency(self):
        assert native_symbol(137) == "POL"
        assert native_symbol(424242) == "ETH"
        assert native_decimals(424242) == 18


class TestLogFiles:

    def test_log_file_path(self, tmp_path):
        path = get_log_file_path(datetime(2024, 3, 9), logs_dir=tmp_path)
        assert path == tmp_path / f"{LOG_FILE_PREFIX}2024-03-09.log"

    def test_cleanup_old_logs(self, tmp_path):
        old = get_log_file_path(datetime.now() - timedelta(days=10), logs_dir=tmp_path)
        recent = get_log_file_path(datetime.now(), logs_dir=tmp_path)
        unrelated = tmp_path / f"{LOG_FILE_PREFIX}notes.log"
        for path in (old, recent, unrelated):
            path.write_text("x")

        assert cleanup_old_logs(7, logs_dir=tmp_path) == 1
        assert not old.exists()
        assert recent.exists()
        assert unrelated.exists()

    def test_negative_retention_keeps_everything(self, tmp_path):
        old = get_log_file_path(datetime.now() - timedelta(days=10), logs_dir=tmp_path)
        old.write_text("x")
        assert cleanup_old_logs(-1, logs_dir=tmp_path) == 0
        assert old.exists()


@contextmanager
def bare_root_logger():
    """Strip root handlers for the duration of a test so configure_logging runs."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


class TestConfigureLogging:

    def test_file_handler(self, tmp_path):
        with bare_root_logger() as root:
            configure_logging(logging.DEBUG, log_to_file=True, logs_dir=tmp_path)

            assert root.level == logging.DEBUG
            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)

            logging.getLogger("services.transfer").info("hello")
            for handler in root.handlers:
                handler.flush()

        assert "hello" in get_log_file_path(logs_dir=tmp_path).read_text(encoding="utf-8")

    def test_configures_once(self):
        with bare_root_logger() as root:
            configure_logging()
            configure_logging()
            assert len(root.handlers) == 1

    def test_leaves_existing_handlers_alone(self):
        with bare_root_logger() as root:
            existing = logging.NullHandler()
            root.addHandler(existing)
            root.setLevel(logging.WARNING)
            configure_logging(logging.DEBUG)

            assert root.handlers == [existing]
            assert root.level == logging.WARNING
