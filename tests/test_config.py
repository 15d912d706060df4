from __future__ import annotations

import json

import pytest

from concentrator_reset.config import ConfigError, Configuration, PinBinding, ResetCommand

YAML_CONFIG = """\
chip_reset: {chip: /dev/gpiochip0, line: 17}
chip_power_enable: [/dev/gpiochip0, 18]
companion_radio_reset:
  chip_device: gpiochip1
  line_offset: 5
reset_commands:
  - [/usr/bin/reset_lgw.sh, start]
  - {program: /bin/true}
check_exit: false
"""


def test_load_yaml(tmp_path):
    path = tmp_path / "reset.yaml"
    path.write_text(YAML_CONFIG, encoding="utf-8")

    config = Configuration.load(path)

    assert config.chip_reset == PinBinding("/dev/gpiochip0", 17)
    assert config.chip_power_enable == PinBinding("/dev/gpiochip0", 18)
    assert config.companion_radio_reset == PinBinding("gpiochip1", 5)
    assert config.dac_reset is None
    assert config.reset_commands == (
        ResetCommand("/usr/bin/reset_lgw.sh", ("start",)),
        ResetCommand("/bin/true"),
    )
    assert config.check_exit is False
    assert [name for name, _ in config.pin_bindings()] == ["chip_reset", "chip_power_enable", "companion_radio_reset"]


def test_load_json(tmp_path):
    path = tmp_path / "reset.json"
    path.write_text(json.dumps({"dac_reset": ["/dev/gpiochip0", 13]}), encoding="utf-8")
    config = Configuration.load(path)
    assert config.dac_reset == PinBinding("/dev/gpiochip0", 13)
    assert config.reset_commands is None
    assert config.check_exit is True


def test_empty_file_is_default_configuration(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert Configuration.load(path) == Configuration()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Missing configuration file"):
        Configuration.load(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "data, message",
    [
        ({"chip_reset": "gpiochip0"}, "chip_reset must be"),
        ({"chip_reset": {"chip": "", "line": 1}}, "chip must be a non-empty string"),
        ({"chip_reset": ["gpiochip0", "17"]}, "line must be an integer"),
        ({"dac_reset": ["gpiochip0", -1]}, "non-negative"),
        ({"reset_commands": "reboot"}, "reset_commands must be a list"),
        ({"reset_commands": [[]]}, r"reset_commands\[0\]"),
        ({"reset_commands": [{"program": "x", "args": "y"}]}, "args must be a list"),
        ({"sx1302_reset": ["gpiochip0", 1]}, "Unknown configuration key"),
    ],
)
def test_invalid_configuration(data, message):
    with pytest.raises(ConfigError, match=message):
        Configuration.from_dict(data)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("chip_reset: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        Configuration.load(path)


def test_reset_command_args_are_strings():
    command = ResetCommand("gpioset", ["gpiochip0", 17])
    assert command.args == ("gpiochip0", "17")
    assert command.argv == ["gpioset", "gpiochip0", "17"]


def test_plain_tuples_are_coerced():
    config = Configuration(
        chip_reset=("/dev/gpiochip0", 17),
        dac_reset=["gpiochip1", 2],
        reset_commands=[("cmd_a", ["1"]), ("cmd_b", [])],
    )
    assert config.chip_reset == PinBinding("/dev/gpiochip0", 17)
    assert config.dac_reset == PinBinding("gpiochip1", 2)
    assert config.reset_commands == (ResetCommand("cmd_a", ("1",)), ResetCommand("cmd_b"))


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"chip_reset": "/dev/gpiochip0"}, "chip_reset must be a PinBinding"),
        ({"companion_radio_reset": ("/dev/gpiochip0",)}, "companion_radio_reset must be"),
        ({"chip_power_enable": ("/dev/gpiochip0", "18")}, "line must be an integer"),
        ({"reset_commands": "reboot"}, "reset_commands must be a sequence"),
        ({"reset_commands": [("cmd_a",)]}, r"reset_commands\[0\] must be"),
        ({"reset_commands": [("cmd_a", "1")]}, "args must be a list"),
        ({"reset_commands": [("", [])]}, "program must be a non-empty string"),
    ],
)
def test_invalid_constructor_values(kwargs, message):
    with pytest.raises(ConfigError, match=message):
        Configuration(**kwargs)
