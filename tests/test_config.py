from pathlib import Path

import pytest

from drakn.config import (
    DEFAULT_PLAYER_VOLUME,
    ConfigError,
    CoreConfig,
    GeneralConfig,
    VolumeConfig,
    get_config_path,
    load_config,
)


def test_defaults():
    config = CoreConfig()
    assert config.general.debug is False
    assert config.general.vsync is False
    assert config.volume.default == DEFAULT_PLAYER_VOLUME


def test_from_empty_mapping_is_default():
    assert CoreConfig.from_mapping({}) == CoreConfig()


def test_from_full_mapping():
    config = CoreConfig.from_mapping(
        {"general": {"debug": True, "vsync": True}, "volume": {"default": 0.25}}
    )
    assert config.general == GeneralConfig(debug=True, vsync=True)
    assert config.volume == VolumeConfig(default=0.25)


def test_integer_volume_becomes_float():
    config = CoreConfig.from_mapping({"volume": {"default": 1}})
    assert config.volume.default == 1.0
    assert isinstance(config.volume.default, float)


def test_unknown_keys_ignored():
    config = CoreConfig.from_mapping({"other": {"x": 1}, "general": {"debug": False, "vsync": True, "extra": 3}})
    assert config.general.vsync is True


@pytest.mark.parametrize(
    "data",
    [
        {"general": {"debug": True}},
        {"general": {"debug": "yes", "vsync": False}},
        {"volume": {}},
        {"volume": {"default": "loud"}},
        {"volume": {"default": True}},
        {"general": 5},
    ],
)
def test_invalid_mappings_raise(data):
    with pytest.raises(ConfigError):
        CoreConfig.from_mapping(data)


def test_config_path_linux(tmp_path):
    path = get_config_path({"HOME": str(tmp_path)}, "linux")
    assert path == tmp_path / ".config" / "drakn" / "config.toml"


def test_config_path_macos(tmp_path):
    path = get_config_path({"HOME": str(tmp_path)}, "darwin")
    assert path == tmp_path / ".config" / "drakn" / "config.toml"


def test_config_path_windows(tmp_path):
    path = get_config_path({"APPDATA": str(tmp_path)}, "win32")
    assert path == tmp_path / "drakn" / "config.toml"


def test_config_path_missing_home():
    with pytest.raises(ConfigError, match="HOME"):
        get_config_path({}, "linux")


def test_config_path_missing_appdata():
    with pytest.raises(ConfigError, match="APPDATA"):
        get_config_path({"HOME": "/home/someone"}, "win32")


def test_config_path_unsupported_platform():
    with pytest.raises(NotImplementedError):
        get_config_path({"HOME": "/home/someone"}, "plan9")


def test_load_full_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general]\ndebug = true\nvsync = true\n\n[volume]\ndefault = 0.75\n")
    config = load_config(path)
    assert config.general == GeneralConfig(debug=True, vsync=True)
    assert config.volume.default == pytest.approx(0.75)


def test_load_partial_sections(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[volume]\ndefault = 0.1\n")
    config = load_config(path)
    assert config.general == GeneralConfig()
    assert config.volume.default == pytest.approx(0.1)


def test_missing_file_falls_back(tmp_path):
    assert load_config(tmp_path / "absent.toml") == CoreConfig()


def test_invalid_toml_falls_back(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general\ndebug = ")
    assert load_config(path) == CoreConfig()


def test_incomplete_section_falls_back_entirely(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general]\ndebug = true\n\n[volume]\ndefault = 0.9\n")
    assert load_config(path) == CoreConfig()


def test_load_accepts_string_path(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[general]\ndebug = false\nvsync = true\n")
    assert load_config(str(path)).general.vsync is True
    assert isinstance(Path(str(path)), Path)