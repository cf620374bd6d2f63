import pytest

from outline_toolkit.ui.controllers import KeyEvent, Keymap


def test_parse_normalises_modifiers_and_key():
    event = KeyEvent.parse("ctrl+shift+up")
    assert (event.shift, event.alt, event.mod) == (True, False, True)
    assert event.key == "ArrowUp"
    assert event.combo == "Shift+Mod+ArrowUp"


@pytest.mark.parametrize(
    "combo, expected",
    [
        ("Cmd+z", "Mod+Z"),
        ("Option+Meta+Down", "Alt+Mod+ArrowDown"),
        ("esc", "Escape"),
        ("Mod+.", "Mod+."),
        ("Shift+Tab", "Shift+Tab"),
    ],
)
def test_canonical_combo(combo, expected):
    assert KeyEvent.parse(combo).combo == expected


def test_parse_keeps_layout_hints():
    event = KeyEvent.parse("ArrowUp", caret_x=4, on_first_line=True)
    assert event.caret_x == 4
    assert event.on_first_line is True


@pytest.mark.parametrize("combo", ["", "Mod+", "Hyper+A"])
def test_parse_rejects_bad_combinations(combo):
    with pytest.raises(ValueError):
        KeyEvent.parse(combo)


def test_keymap_skips_invalid_and_unbound_entries():
    keymap = Keymap({"Hyper+A": "copy", "Mod+C": "copy", "ctrl+c": "copy", "Mod+Z": None})
    assert keymap.bindings == {"Mod+C": "copy"}
    assert keymap.command_for(KeyEvent("c", mod=True)) == "copy"
    assert keymap.command_for(KeyEvent("Z", mod=True)) is None


def test_combos_for_command():
    keymap = Keymap({"Tab": "indent", "Alt+Mod+ArrowRight": "indent", "Mod+C": "copy"})
    assert sorted(keymap.combos_for("indent")) == ["Alt+Mod+ArrowRight", "Tab"]


def test_from_config_uses_packaged_bindings():
    keymap = Keymap.from_config()
    assert keymap.command_for(KeyEvent.parse("Alt+Mod+ArrowUp")) == "swap_up"
    assert keymap.command_for(KeyEvent.parse("Mod+,")) == "zoom_out"
