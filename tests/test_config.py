import pytest
from loguru import logger

from polysolid.config import (
    CONFIG_ENV,
    SolidSettings,
    configure_logging,
    get_settings,
    load_settings,
    set_settings,
)


def test_defaults():
    settings = SolidSettings()
    assert settings.corner_bias == 0.95
    assert settings.weld_repair is True
    assert settings.log_level == "WARNING"
    assert settings.as_dict() == {"corner_bias": 0.95, "weld_repair": True,
                                  "log_level": "WARNING"}


@pytest.mark.parametrize("bias", [0.5, 1.0, 0.2, 1.5])
def test_corner_bias_range(bias):
    with pytest.raises(ValueError):
        SolidSettings(corner_bias=bias)


def test_load_from_file(tmp_path):
    path = tmp_path / "polysolid.yaml"
    path.write_text("corner_bias: 0.9\nweld_repair: false\nlog_level: debug\n")
    settings = load_settings(path)
    assert settings.corner_bias == 0.9
    assert settings.weld_repair is False
    assert settings.log_level == "DEBUG"


def test_load_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("corner_bias: 0.8\n")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    assert load_settings().corner_bias == 0.8


def test_load_without_file(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    assert load_settings() == SolidSettings()


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_settings(path) == SolidSettings()


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("corner_bias: 0.9\ntolerance: 1e-3\n")
    with pytest.raises(ValueError, match="tolerance"):
        load_settings(path)


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_settings(path)


def test_set_settings_returns_previous():
    custom = SolidSettings(corner_bias=0.75)
    old = set_settings(custom)
    assert get_settings() is custom
    assert set_settings(old) is custom
    assert get_settings() is old


def test_configure_logging_filters_by_level(capsys):
    configure_logging("INFO")
    try:
        logger.debug("hidden detail")
        logger.info("visible note")
        err = capsys.readouterr().err
        assert "visible note" in err
        assert "hidden detail" not in err
        assert "INFO" in err
    finally:
        logger.remove()


@pytest.mark.parametrize("weld_repair, calls", [(True, 1), (False, 0)])
def test_weld_repair_setting(make_box, monkeypatch, weld_repair, calls):
    from polysolid import solids
    from polysolid.geom import point

    seen = []
    monkeypatch.setattr(solids, "weld", lambda entities, owner: seen.append(owner))
    set_settings(SolidSettings(weld_repair=weld_repair))
    a = make_box(point(0, 0, 0), point(2, 2, 2))
    b = make_box(point(1, 1, 0), point(3, 3, 2))
    assert solids.union(a, b) is True
    assert len(seen) == calls
