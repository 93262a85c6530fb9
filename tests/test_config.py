from Rollmark.config import load_settings


def test_defaults_without_config(tmp_path, monkeypatch):
    # Ensure no config.toml in temp dir so defaults apply
    monkeypatch.chdir(tmp_path)
    s = load_settings()
    assert s.dice_history_capacity == 50
    assert s.dice_rng_seed is None
    assert s.logging_console == "INFO"
    assert s.logging_file == "NONE"


def test_toml_source(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.toml").write_text(
        "[app]\nenv = \"test\"\n\n"
        "[dice]\nhistory_capacity = 7\nrng_seed = 11\n\n"
        "[logging]\nlevel = \"debug\"\nconsole = false\nto_file = true\n"
    )
    s = load_settings()
    assert s.env == "test"
    assert s.dice_history_capacity == 7
    assert s.dice_rng_seed == 11
    assert s.logging_console == "NONE"
    assert s.logging_level == "DEBUG"
    assert s.logging_file == "DEBUG"


def test_env_overrides_toml(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.toml").write_text("[dice]\nhistory_capacity = 7\n")
    monkeypatch.setenv("ROLLMARK_DICE_HISTORY_CAPACITY", "9")
    assert load_settings().dice_history_capacity == 9


def test_max_dice_count(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_settings().dice_max_count == 1000
    (tmp_path / "config.toml").write_text("[dice]\nmax_count = 20\n")
    assert load_settings().dice_max_count == 20
