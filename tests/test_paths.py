import paths


def test_existing_relative_path_is_used_as_is(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "song.csv").write_text("header\n", encoding="utf-8")
    assert paths.resolve_chart_path("song.csv").name == "song.csv"
    assert not paths.resolve_chart_path("song.csv").is_absolute()


def test_name_is_found_in_search_directories(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    user_dir = tmp_path / "user_charts"
    user_dir.mkdir()
    (user_dir / "tune.csv").write_text("header\n", encoding="utf-8")
    monkeypatch.setattr(paths, "chart_search_dirs", lambda: [tmp_path / "missing", user_dir])
    assert paths.resolve_chart_path("tune.csv") == user_dir / "tune.csv"


def test_unknown_name_falls_back_to_project_charts_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(paths, "chart_search_dirs", lambda: [])
    assert paths.resolve_chart_path("nowhere.csv") == paths.charts_dir() / "nowhere.csv"
