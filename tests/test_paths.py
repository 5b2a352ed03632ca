import sys, pathlib

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import utils.paths as paths


def test_paths_live_under_app_dirs():
    assert paths.APP_NAME in str(paths.DATA_DIR)
    assert paths.CONFIG_PATH.parent == paths.DATA_DIR
    assert paths.PORTFOLIO_PATH.name == "portfolio.yaml"


def test_init_app_paths_copies_legacy_files(monkeypatch, tmp_path):
    data = tmp_path / "data"
    monkeypatch.setattr(paths, "DATA_DIR", data)
    monkeypatch.setattr(paths, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(paths, "CONFIG_PATH", data / "config.yaml")
    monkeypatch.setattr(paths, "PORTFOLIO_PATH", data / "portfolio.yaml")
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    (cwd / "portfolio.yaml").write_text("entries: []\n")
    monkeypatch.chdir(cwd)

    paths.init_app_paths()

    assert (tmp_path / "logs").is_dir()
    assert (data / "portfolio.yaml").read_text() == "entries: []\n"
    assert not (data / "config.yaml").exists()
