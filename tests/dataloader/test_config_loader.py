# tests/dataloader/test_config_loader.py

from pathlib import Path

import pytest
import yaml

from alloccheck.dataloader.config_loader import ConfigLoader
from alloccheck.errors import ConfigError
from alloccheck.schemas.models import Config


@pytest.fixture()
def tmp_yaml(tmp_path: Path) -> Path:
    """Writes a temporary YAML with valid Config fields."""
    path = tmp_path / "config.yaml"
    cfg = {
        "clients_path": "in/clients.csv",
        "output_dir": "out",
        "normalizer": {"list_delimiter": ";", "default_priority": 2},
        "validation": {"fail_on_warnings": True},
    }
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f)
    return path


def test_load_valid_yaml_returns_config(tmp_yaml: Path):
    """
    @brief
    Verify that valid YAML is correctly parsed and validated.

    @details
    Ensures that a well-formed YAML configuration file produces
    a fully validated `Config` object and that omitted settings
    (default_duration, write_report) keep their defaults.
    """
    # --- Arrange ---
    loader = ConfigLoader()

    # --- Act ---
    cfg = loader.load(tmp_yaml)

    # --- Assert ---
    assert isinstance(cfg, Config)
    assert cfg.clients_path == "in/clients.csv"
    assert cfg.workers_path is None
    assert cfg.output_dir == "out"
    assert cfg.normalizer.list_delimiter == ";"
    assert cfg.normalizer.default_priority == 2
    assert cfg.normalizer.default_duration == 1
    assert cfg.validation.fail_on_warnings is True
    assert cfg.validation.write_report is True


def test_repository_config_is_valid():
    """The sample config shipped in config/ must load cleanly."""
    path = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
    cfg = ConfigLoader().load(path)
    assert cfg.validation.report_filename == "validation_report.json"


def test_missing_file_raises_configerror(tmp_path: Path):
    """
    @brief
    Missing configuration file triggers ConfigError.
    """
    # --- Arrange ---
    loader = ConfigLoader()
    path = tmp_path / "no_such.yaml"

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader.load(path)

    # --- Assert ---
    assert "Configuration file not found" in str(e.value)


def test_wrong_extension_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.txt"
    path.write_text("output_dir: out", encoding="utf-8")
    loader = ConfigLoader()

    # --- Act / Assert ---
    with pytest.raises(ConfigError):
        loader.load(path)


def test_empty_yaml_yields_defaults(tmp_path: Path):
    """
    @brief
    Empty YAML file is accepted and yields an all-default Config.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    # --- Act ---
    cfg = ConfigLoader().load(path)

    # --- Assert ---
    assert cfg.output_dir == "data/output"
    assert cfg.normalizer.list_delimiter == ","
    assert cfg.validation.fail_on_warnings is False


def test_yaml_with_extra_field_raises_configerror(tmp_yaml: Path):
    """
    @brief
    Extra field in YAML causes validation error.

    @details
    Adds an unexpected key to configuration to confirm
    schema validation rejects unknown fields.
    """
    # --- Arrange ---
    data = yaml.safe_load(tmp_yaml.read_text())
    data["extra_field"] = 42
    tmp_yaml.write_text(yaml.safe_dump(data), encoding="utf-8")
    loader = ConfigLoader()

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader.load(tmp_yaml)

    # --- Assert ---
    assert "extra" in str(e.value).lower()


def test_out_of_bounds_default_raises_configerror(tmp_yaml: Path):
    """
    @brief
    Default priority outside 1..5 is rejected by the schema.
    """
    # --- Arrange ---
    data = yaml.safe_load(tmp_yaml.read_text())
    data["normalizer"]["default_priority"] = 9
    tmp_yaml.write_text(yaml.safe_dump(data), encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(tmp_yaml)

    # --- Assert ---
    assert "Invalid configuration" in str(e.value)
    assert "default_priority" in str(e.value)


def test_invalid_path_type_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    loader = ConfigLoader()
    wrong_type = str(tmp_path / "config.yaml")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader._read_yaml(wrong_type)

    # --- Assert ---
    msg = str(e.value)
    assert "Invalid path type" in msg
    assert "pathlib.Path" in msg


def test_yaml_parsing_error_raises_configerror(tmp_path: Path):
    """
    @brief
    Corrupted YAML triggers ConfigError.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("output_dir: 'out\nnormalizer: {", encoding="utf-8")
    loader = ConfigLoader()

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader._read_yaml(path)

    # --- Assert ---
    msg = str(e.value)
    assert "YAML parsing failed" in msg
    assert "Fix YAML syntax" in msg


def test_unable_to_read_file_raises_configerror(monkeypatch, tmp_path: Path):
    """
    @brief
    Simulates OSError when opening file.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("output_dir: out", encoding="utf-8")

    def fake_open(*args, **kwargs):
        raise OSError("Permission denied")

    monkeypatch.setattr(Path, "open", fake_open)
    loader = ConfigLoader()

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader._read_yaml(path)

    # --- Assert ---
    msg = str(e.value)
    assert "Unable to read configuration file" in msg
    assert "Permission denied" in msg


def test_yaml_root_not_mapping_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    # --- Assert ---
    assert "Configuration root must be a mapping" in str(e.value)


def test_load_or_default_missing_file_gives_defaults(tmp_path: Path):
    cfg = ConfigLoader().load_or_default(tmp_path / "absent.yaml")
    assert cfg == Config()


def test_load_or_default_still_validates_existing_file(tmp_yaml: Path):
    # --- Arrange ---
    tmp_yaml.write_text("normalizer:\n  list_delimiter: ''\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError, match="list_delimiter"):
        ConfigLoader().load_or_default(tmp_yaml)
