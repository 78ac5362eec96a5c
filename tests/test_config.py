from __future__ import annotations

import pytest

from core.config import AutomationConfig, automation_from_dict, channels_from_list, wishlist_from_dict


def test_automation_defaults() -> None:
    assert automation_from_dict({}) == AutomationConfig()


def test_automation_accepts_single_command_string() -> None:
    config = automation_from_dict({"roll_commands": "$wa", "auto_daily": False, "initial_budget": "4"})

    assert config.roll_commands == ("$wa",)
    assert not config.auto_daily
    assert config.initial_budget == 4


def test_automation_blank_commands_fall_back_to_defaults() -> None:
    assert automation_from_dict({"roll_commands": [" ", ""]}).roll_commands == ("$wa", "$ha")


def test_wishlist_threshold_is_validated() -> None:
    assert wishlist_from_dict({"fuzzy_threshold": 0.9}).fuzzy_threshold == 0.9
    with pytest.raises(ValueError):
        wishlist_from_dict({"fuzzy_threshold": 1.2})


def test_channels_skip_disabled_and_duplicates() -> None:
    channels, aliases = channels_from_list(
        [
            {"channel_id": "20", "alias": "rolls"},
            {"channel_id": "21", "enabled": False},
            {"channel_id": ""},
            {"channel_id": 20},
            {"channel_id": 22},
        ]
    )

    assert channels == [20, 22]
    assert aliases == {20: "rolls"}
