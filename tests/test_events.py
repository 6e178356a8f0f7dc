"""Unit tests for client event parsing."""

import pytest

from models.errors import InvalidInput
from models.events import (
    CreateRoomEvent,
    JoinRoomEvent,
    PlayerInputEvent,
    ShootEvent,
    parse_client_message,
)


@pytest.mark.unit
class TestParseClientMessage:
    def test_type_field_form(self):
        kind, event = parse_client_message(
            {"type": "createRoom", "playerName": "Ann", "difficulty": "hard", "numBots": 3}
        )
        assert kind == "createRoom"
        assert isinstance(event, CreateRoomEvent)
        assert event.playerName == "Ann"
        assert event.difficulty == "hard"
        assert event.numBots == 3

    def test_event_data_form(self):
        kind, event = parse_client_message({"event": "joinRoom", "data": {"roomId": "abc123"}})
        assert kind == "joinRoom"
        assert isinstance(event, JoinRoomEvent)
        assert event.roomId == "ABC123"

    def test_bot_count_alias_and_lenient_value(self):
        _, event = parse_client_message({"type": "createRoom", "botCount": "5"})
        assert event.numBots == 5
        _, event = parse_client_message({"type": "createRoom", "numBots": "lots"})
        assert event.numBots is None

    @pytest.mark.parametrize("difficulty", [None, 3, ["hard"]])
    def test_non_string_difficulty_is_tolerated(self, difficulty):
        _, event = parse_client_message({"type": "createRoom", "difficulty": difficulty})
        assert event.difficulty is None

    def test_create_room_defaults(self):
        _, event = parse_client_message({"type": "createRoom"})
        assert event.playerName is None
        assert event.difficulty == "easy"
        assert event.numBots is None

    def test_room_id_is_trimmed_and_upper_cased(self):
        _, event = parse_client_message({"type": "joinRoom", "roomId": "  xy12ab "})
        assert event.roomId == "XY12AB"

    def test_shoot_accepts_mouse_aliases(self):
        _, event = parse_client_message(
            {"type": "shoot", "mouseWorldX": 10.5, "mouseWorldY": 20, "timestamp": 1000}
        )
        assert isinstance(event, ShootEvent)
        assert (event.targetWorldX, event.targetWorldY) == (10.5, 20)

    def test_player_input_keys(self):
        _, event = parse_client_message({"type": "playerInput", "keys": {"up": True, "left": False}})
        assert isinstance(event, PlayerInputEvent)
        assert event.keys == {"up": True, "left": False}

    def test_start_and_restart_need_no_fields(self):
        assert parse_client_message({"type": "startGame"})[0] == "startGame"
        assert parse_client_message({"event": "restartGame"})[0] == "restartGame"


@pytest.mark.unit
class TestRejectedMessages:
    def test_unknown_type(self):
        with pytest.raises(InvalidInput, match="Unknown event type"):
            parse_client_message({"type": "teleport"})

    def test_missing_type(self):
        with pytest.raises(InvalidInput):
            parse_client_message({"keys": {}})

    def test_not_an_object(self):
        with pytest.raises(InvalidInput):
            parse_client_message(["createRoom"])

    def test_missing_required_field(self):
        with pytest.raises(InvalidInput, match="keys"):
            parse_client_message({"type": "playerInput"})

    def test_shoot_without_timestamp(self):
        with pytest.raises(InvalidInput):
            parse_client_message({"type": "shoot", "targetWorldX": 1, "targetWorldY": 2})

    def test_data_must_be_an_object(self):
        with pytest.raises(InvalidInput):
            parse_client_message({"event": "joinRoom", "data": "ABC123"})
