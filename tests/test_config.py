"""Tests for environment configuration and logging setup."""

import logging

import structlog
from structlog.testing import capture_logs

from kinship_graph.config import KinshipConfig
from kinship_graph.logging import configure_default_logging, configure_logging, get_logger


class TestKinshipConfig:
    def test_defaults(self, monkeypatch):
        for name in ("KINSHIP_DB_PATH", "KINSHIP_LOG_LEVEL", "KINSHIP_BUSY_TIMEOUT_MS", "KINSHIP_INFERENCE_ENABLED"):
            monkeypatch.delenv(name, raising=False)
        config = KinshipConfig.from_env()
        assert config.db_path == "./data/kinship.db"
        assert config.log_level == "INFO"
        assert config.busy_timeout_ms == 5000
        assert config.inference_enabled is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("KINSHIP_DB_PATH", "/tmp/family.db")
        monkeypatch.setenv("KINSHIP_LOG_LEVEL", "debug")
        monkeypatch.setenv("KINSHIP_BUSY_TIMEOUT_MS", "250")
        monkeypatch.setenv("KINSHIP_INFERENCE_ENABLED", "false")
        config = KinshipConfig.from_env()
        assert config.db_path == "/tmp/family.db"
        assert config.log_level == "DEBUG"
        assert config.busy_timeout_ms == 250
        assert config.inference_enabled is False

    def test_open_graph_from_config(self, tmp_path, monkeypatch):
        from kinship_graph.service import KinshipGraph

        monkeypatch.setenv("KINSHIP_INFERENCE_ENABLED", "0")
        graph = KinshipGraph.open(tmp_path / "cfg.db", config=KinshipConfig.from_env())
        assert graph.inference_enabled is False
        assert graph.db.busy_timeout_ms == 5000
        graph.close()


class TestLoggingSetup:
    """Tests for structlog configuration."""

    def teardown_method(self):
        structlog.reset_defaults()
        configure_default_logging()

    def test_configure_logging_sets_level(self):
        configure_logging("WARNING")
        config = structlog.get_config()
        assert config["cache_logger_on_first_use"] is True
        assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.WARNING)
        assert get_logger() is not None

    def test_library_default_drops_debug(self):
        structlog.reset_defaults()
        configure_default_logging()
        config = structlog.get_config()
        assert config["wrapper_class"] is structlog.make_filtering_bound_logger(logging.INFO)
        assert config["cache_logger_on_first_use"] is False

    def test_library_default_keeps_host_configuration(self):
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.ERROR))
        configure_default_logging()
        assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(logging.ERROR)

    def test_debug_events_are_dropped_by_default(self, tmp_path):
        from kinship_graph.service import KinshipGraph
        from kinship_graph.storage.database import Database

        structlog.reset_defaults()
        configure_default_logging()
        graph = KinshipGraph(Database(tmp_path / "quiet.db"))
        a = graph.people.add_person(first_name="A").person_id
        b = graph.people.add_person(first_name="B").person_id

        with capture_logs() as logs:
            graph.create_edge(a, b, "sibling")
        graph.close()

        events = [entry["event"] for entry in logs]
        assert "edge.created" in events
        assert "edge.inserted" not in events
        assert "mirror.created" not in events
