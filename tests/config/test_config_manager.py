from outline_toolkit.config import ConfigManager


def test_packaged_defaults_load(isolated_config):
    config = ConfigManager()
    assert config.get_keymap()["bindings"]["Alt+Mod+ArrowUp"] == "swap_up"
    assert config.get_editor_settings()["undo"]["max_history"] == 50
    assert config.get_editor_settings()["clipboard"]["separator"] == "\n\n"
    assert config.get_logging_config()["version"] == 1


def test_is_singleton():
    assert ConfigManager() is ConfigManager()


def test_defaults_copied_to_user_dir(isolated_config):
    ConfigManager()
    assert (isolated_config / "keymap.yml").exists()
    assert (isolated_config / "editor.yml").exists()


def test_user_overrides_merge_into_sections(isolated_config, monkeypatch):
    isolated_config.mkdir(parents=True)
    (isolated_config / "editor.yml").write_text("undo:\n  max_history: 5\n", encoding="utf-8")
    (isolated_config / "keymap.yml").write_text(
        "bindings:\n  Mod+Z: null\n  Mod+U: undo\n", encoding="utf-8"
    )

    config = ConfigManager()

    assert config.get_editor_settings()["undo"]["max_history"] == 5
    assert config.get_editor_settings()["clipboard"]["separator"] == "\n\n"
    bindings = config.get_keymap()["bindings"]
    assert bindings["Mod+U"] == "undo"
    assert bindings["Mod+Z"] is None
    assert bindings["Mod+C"] == "copy"


def test_invalid_user_file_keeps_packaged_defaults(isolated_config):
    isolated_config.mkdir(parents=True)
    (isolated_config / "editor.yml").write_text("undo: [unclosed\n", encoding="utf-8")
    config = ConfigManager()
    assert config.get_editor_settings()["undo"]["max_history"] == 50
