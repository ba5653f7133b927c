"""
Unit tests for tidepool/utils and tidepool/geo_utils.py
"""

import logging

import pytest

from tidepool.geo_utils import distance_m, meters_per_degree_lon, offset_coordinate, validate_coordinate
from tidepool.utils.env import env_bool, env_float, env_log_level, env_str
from tidepool.utils.error_handling import (
    ConfigError,
    InvalidCoordinateError,
    TidepoolError,
    VocabularyMismatchError,
    safe_execute,
)
from tidepool.utils.session_logging import SessionLogHandler


class TestGeoUtils:
    def test_offset_and_distance_agree(self):
        base = (37.7749, -122.4194)
        moved = offset_coordinate(base, 100.0, 0.0)
        assert distance_m(base, moved) == pytest.approx(100.0, rel=0.01)
        moved = offset_coordinate(base, 0.0, 100.0)
        assert distance_m(base, moved) == pytest.approx(100.0, rel=0.01)

    def test_longitude_scale_has_floor_at_pole(self):
        assert meters_per_degree_lon(90.0) > 0

    def test_validate(self):
        assert validate_coordinate((1, 2)) == (1.0, 2.0)
        with pytest.raises(InvalidCoordinateError):
            validate_coordinate((0.0, 200.0))


class TestErrorHandling:
    def test_hierarchy(self):
        assert issubclass(ConfigError, TidepoolError)
        assert issubclass(VocabularyMismatchError, ConfigError)
        assert issubclass(InvalidCoordinateError, ValueError)
        error = VocabularyMismatchError(3, 4)
        assert (error.left_length, error.right_length) == (3, 4)

    def test_safe_execute(self, caplog):
        assert safe_execute(lambda x: x * 2, 4) == 8

        def boom():
            raise RuntimeError("boom")

        assert safe_execute(boom, default="fallback", error_context="Sink") == "fallback"
        assert "Sink: RuntimeError: boom" in caplog.text


class TestEnv:
    def test_bool(self, monkeypatch):
        monkeypatch.setenv("TIDEPOOL_FLAG", "Yes")
        assert env_bool("TIDEPOOL_FLAG") is True
        monkeypatch.setenv("TIDEPOOL_FLAG", "0")
        assert env_bool("TIDEPOOL_FLAG", True) is False
        monkeypatch.delenv("TIDEPOOL_FLAG")
        assert env_bool("TIDEPOOL_FLAG", True) is True

    def test_str_and_float(self, monkeypatch):
        monkeypatch.setenv("TIDEPOOL_ZOOM", "15.5")
        assert env_float("TIDEPOOL_ZOOM") == 15.5
        monkeypatch.setenv("TIDEPOOL_ZOOM", "far")
        assert env_float("TIDEPOOL_ZOOM", 14.0) == 14.0
        assert env_str("TIDEPOOL_UNSET_VARIABLE", "x") == "x"

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("TIDEPOOL_LOG_LEVEL", "debug")
        assert env_log_level() == logging.DEBUG
        monkeypatch.setenv("TIDEPOOL_LOG_LEVEL", "30")
        assert env_log_level() == 30
        monkeypatch.setenv("TIDEPOOL_LOG_LEVEL", "chatty")
        assert env_log_level() == logging.INFO


class TestSessionLogHandler:
    """File logging for one session."""

    def test_writes_and_detaches(self, tmp_path):
        root = logging.getLogger()
        previous = root.level
        root.setLevel(logging.INFO)
        try:
            with SessionLogHandler("abc", tmp_path) as session:
                logging.getLogger("tidepool.test").info("inside session")
            assert session.handler is None
            text = session.log_path().read_text()
            assert "Session started: abc" in text
            assert "inside session" in text
            assert "Session completed: abc" in text
        finally:
            root.setLevel(previous)

        assert not any(
            getattr(h, "baseFilename", "").endswith("tidepool.log") and "abc" in h.baseFilename
            for h in root.handlers
        )

    def test_failure_is_recorded(self, tmp_path):
        root = logging.getLogger()
        previous = root.level
        root.setLevel(logging.INFO)
        try:
            with pytest.raises(KeyError):
                with SessionLogHandler("failing", tmp_path):
                    raise KeyError("missing")
        finally:
            root.setLevel(previous)
        assert "Session failed: failing" in (tmp_path / "failing" / "tidepool.log").read_text()

    def test_no_log_path_before_use(self, tmp_path):
        assert SessionLogHandler("unused", tmp_path).log_path() is None
