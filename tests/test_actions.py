"""Action data model: document decoding, descriptions and agent mapping."""

from __future__ import annotations

import pytest

from macro.actions import (
    Action,
    ActionError,
    ActionType,
    AgentAction,
    UnmappedAction,
    from_agent_action,
    to_agent_action,
)


class TestActionDocument:
    def test_to_dict_omits_null_fields(self):
        action = Action(type=ActionType.CLICK, x=10, y=20)
        assert action.to_dict() == {
            "type": "CLICK",
            "x": 10,
            "y": 20,
            "delay": 0,
            "description": "",
        }

    def test_from_dict_defaults_missing_optionals(self):
        action = Action.from_dict({"type": "WAIT"})
        assert action.type is ActionType.WAIT
        assert action.duration is None
        assert action.x is None and action.index is None
        assert action.delay == 0
        assert action.description == ""

    def test_from_dict_reads_all_fields(self):
        action = Action.from_dict(
            {
                "type": "SWIPE",
                "x": 1,
                "y": 2,
                "x2": 3,
                "y2": 4,
                "delay": 250,
                "description": "scroll down",
            }
        )
        assert (action.x, action.y, action.x2, action.y2) == (1, 2, 3, 4)
        assert action.delay == 250
        assert action.description == "scroll down"

    def test_unknown_type_raises(self):
        with pytest.raises(ActionError):
            Action.from_dict({"type": "TELEPORT", "x": 1, "y": 1})

    def test_missing_type_raises(self):
        with pytest.raises(ActionError):
            Action.from_dict({"x": 1, "y": 1})


class TestShortDescription:
    def test_explicit_description_wins(self):
        assert Action(type=ActionType.CLICK, x=1, y=2, description="Login").short_description() == "Login"

    @pytest.mark.parametrize(
        "action, expected",
        [
            (Action(type=ActionType.CLICK, index=4), "Tap element #4"),
            (Action(type=ActionType.CLICK, x=5, y=6), "Tap (5, 6)"),
            (Action(type=ActionType.LONG_PRESS, index=2), "Long press element #2"),
            (Action(type=ActionType.DOUBLE_TAP, x=1, y=1), "Double tap (1, 1)"),
            (Action(type=ActionType.SWIPE, x=0, y=0, x2=9, y2=9), "Swipe (0, 0) -> (9, 9)"),
            (Action(type=ActionType.SYSTEM_BUTTON, button="back"), "Button: back"),
            (Action(type=ActionType.WAIT, duration=3), "Wait 3s"),
            (Action(type=ActionType.OPEN_APP, text="Settings"), "Open: Settings"),
        ],
    )
    def test_derived(self, action, expected):
        assert action.short_description() == expected

    def test_type_text_truncated_after_twenty_chars(self):
        action = Action(type=ActionType.TYPE, text="a" * 25)
        assert action.short_description() == "Type: " + "a" * 20 + "..."
        assert Action(type=ActionType.TYPE, text="hi").short_description() == "Type: hi"


class TestAgentMapping:
    def test_every_type_maps_both_ways(self):
        for action_type in ActionType:
            action = Action(type=action_type, x=1, y=2, text="t", duration=1)
            agent = to_agent_action(action)
            back = from_agent_action(agent)
            assert isinstance(back, Action)
            assert back.type is action_type

    def test_agent_names(self):
        assert to_agent_action(Action(type=ActionType.LONG_PRESS)).type == "long_press"
        assert to_agent_action(Action(type=ActionType.SYSTEM_BUTTON)).type == "system_button"

    def test_unknown_agent_type_is_unmapped(self):
        result = from_agent_action(AgentAction(type="finish"))
        assert result == UnmappedAction(type_name="finish")

    def test_from_agent_carries_description_and_delay(self):
        result = from_agent_action(AgentAction(type="click", index=7), description="ok", delay=30)
        assert isinstance(result, Action)
        assert result.index == 7
        assert result.is_index_mode
        assert result.description == "ok"
        assert result.delay == 30
