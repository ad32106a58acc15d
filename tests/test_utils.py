"""Tests for configuration and logging utilities."""

import logging
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent


class TestConfigLoader:
    """Tests for ConfigLoader and load_config."""

    def test_defaults_without_file(self):
        from eucm_camera.utils.config_loader import load_config

        config = load_config()

        assert config["roundtrip"]["width"] == 1920
        assert config["roundtrip"]["height"] == 1080
        assert config["roundtrip"]["tolerance"]["float64"] == 1e-12
        assert config["calibration"] is None

    def test_defaults_not_shared(self):
        """Mutating a loaded config leaves the defaults alone."""
        from eucm_camera.utils.config_loader import DEFAULT_CONFIG, load_config

        config = load_config()
        config["roundtrip"]["width"] = 1

        assert DEFAULT_CONFIG["roundtrip"]["width"] == 1920

    def test_file_merged_over_defaults(self, tmp_path):
        from eucm_camera.utils.config_loader import load_config

        path = tmp_path / "custom.yaml"
        path.write_text("roundtrip:\n  width: 1280\n  height: 800\n")

        config = load_config(path)

        assert config["roundtrip"]["width"] == 1280
        assert config["roundtrip"]["step"] == 65
        assert config["logging"]["level"] == "INFO"

    def test_overrides_applied_last(self, tmp_path):
        from eucm_camera.utils.config_loader import load_config

        path = tmp_path / "custom.yaml"
        path.write_text("roundtrip:\n  step: 10\n")

        config = load_config(path, overrides={"roundtrip": {"step": 20}})

        assert config["roundtrip"]["step"] == 20

    def test_missing_file(self, tmp_path):
        from eucm_camera.utils.config_loader import ConfigLoader

        with pytest.raises(FileNotFoundError):
            ConfigLoader().load(tmp_path / "missing.yaml")

    def test_include_calibration(self, tmp_path):
        """A quoted !include value is replaced by the included document."""
        from eucm_camera.utils.config_loader import ConfigLoader

        (tmp_path / "cam.yaml").write_text("fx: 717.25\nalpha: 0.625\n")
        (tmp_path / "main.yaml").write_text('calibration: "!include cam.yaml"\n')

        config = ConfigLoader().load(tmp_path / "main.yaml")

        assert config["calibration"] == {"fx": 717.25, "alpha": 0.625}

    def test_missing_include(self, tmp_path):
        from eucm_camera.utils.config_loader import ConfigLoader

        (tmp_path / "main.yaml").write_text('calibration: "!include nope.yaml"\n')

        with pytest.raises(FileNotFoundError):
            ConfigLoader().load(tmp_path / "main.yaml")

    def test_cache_returns_copies(self, tmp_path):
        from eucm_camera.utils.config_loader import ConfigLoader

        path = tmp_path / "main.yaml"
        path.write_text("roundtrip:\n  step: 10\n")
        loader = ConfigLoader()

        first = loader.load(path)
        first["roundtrip"]["step"] = 99

        assert loader.load(path)["roundtrip"]["step"] == 10

    def test_relative_path_uses_config_dir(self, tmp_path):
        from eucm_camera.utils.config_loader import ConfigLoader

        (tmp_path / "settings.yaml").write_text("logging:\n  level: DEBUG\n")
        loader = ConfigLoader(config_dir=str(tmp_path))

        assert loader.load("settings.yaml")["logging"]["level"] == "DEBUG"

    def test_save_and_reload(self, tmp_path):
        from eucm_camera.utils.config_loader import ConfigLoader, DEFAULT_CONFIG

        loader = ConfigLoader()
        path = tmp_path / "out" / "config.yaml"

        loader.save(DEFAULT_CONFIG, path)

        assert loader.load(path) == DEFAULT_CONFIG

    def test_default_config_file(self):
        """configs/default.yaml pulls in the bundled calibration."""
        from eucm_camera.calibration.serialization import params_from_dict
        from eucm_camera.utils.config_loader import load_config

        config = load_config(PROJECT_ROOT / "configs" / "default.yaml")
        params = params_from_dict(config["calibration"])

        assert params.fx == 717.25
        assert config["roundtrip"]["tolerance"]["float32"] == 1e-3

    def test_merge_nested(self):
        from eucm_camera.utils.config_loader import ConfigLoader

        merged = ConfigLoader().merge(
            {"a": {"b": 1, "c": 2}, "d": 3},
            {"a": {"c": 5}, "e": 6},
        )

        assert merged == {"a": {"b": 1, "c": 5}, "d": 3, "e": 6}


class TestGetNested:
    """Tests for get_nested()."""

    def test_dotted_key(self):
        from eucm_camera.utils.config_loader import get_nested, load_config

        config = load_config()

        assert get_nested(config, "roundtrip.tolerance.float32") == 1e-3

    def test_missing_key_default(self):
        from eucm_camera.utils.config_loader import get_nested

        assert get_nested({"a": {"b": 1}}, "a.x", default="none") == "none"
        assert get_nested({"a": 1}, "a.b") is None


class TestLogger:
    """Tests for logging setup."""

    def test_setup_logger_level(self):
        from eucm_camera.utils.logger import setup_logger

        logger = setup_logger("eucm_camera.test_level", level="debug")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logger_replaces_handlers(self):
        from eucm_camera.utils.logger import setup_logger

        setup_logger("eucm_camera.test_replace")
        logger = setup_logger("eucm_camera.test_replace")

        assert len(logger.handlers) == 1

    def test_setup_logger_file(self, tmp_path):
        from eucm_camera.utils.logger import setup_logger

        log_file = tmp_path / "logs" / "eucm.log"
        logger = setup_logger("eucm_camera.test_file", log_file=str(log_file), console=False)

        logger.info("round trip ok")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text()
        assert "round trip ok" in content
        assert "| INFO     | eucm_camera.test_file |" in content

        setup_logger("eucm_camera.test_file", console=False)

    def test_unknown_level(self):
        from eucm_camera.utils.logger import setup_logger

        with pytest.raises(ValueError):
            setup_logger("eucm_camera.test_bad", level="LOUD")

    def test_get_logger_namespaces_names(self):
        from eucm_camera.utils.logger import get_logger

        assert get_logger("calibration").name == "eucm_camera.calibration"
        assert get_logger("eucm_camera.calibration.roundtrip").name == "eucm_camera.calibration.roundtrip"

    def test_module_loggers_propagate(self, caplog):
        """Library modules log through the package hierarchy."""
        from eucm_camera.calibration.intrinsics import EucmParams
        from eucm_camera.calibration.roundtrip import roundtrip_intrinsics

        params = EucmParams(fx=717.25, fy=716.5, cx=958.5, cy=541.25, alpha=0.625, beta=1.0625)

        with caplog.at_level(logging.DEBUG, logger="eucm_camera"):
            roundtrip_intrinsics(params, width=200, height=200, border=0, step=50)

        assert any(
            record.name == "eucm_camera.calibration.roundtrip" and "Round trip" in record.getMessage()
            for record in caplog.records
        )
