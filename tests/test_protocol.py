"""Tests for wire protocol decoding and encoding."""

import json
from datetime import UTC, datetime

import pytest

from guardian_link.domain.guardians import GuardianRecord
from guardian_link.protocol import (
    AcceptHelp,
    GuardianList,
    HelpAlreadyAssigned,
    ProtocolError,
    RegisterGuardian,
    RequestHelp,
    UpdateLocation,
    parse_frame,
)


def test_parse_register_guardian_with_optional_fields() -> None:
    message = parse_frame(
        json.dumps(
            {"event": "registerGuardian", "data": {"alias": "G1", "extra": True}}
        )
    )

    assert isinstance(message, RegisterGuardian)
    assert message.alias == "G1"
    assert message.lat is None


def test_parse_request_help_without_data() -> None:
    message = parse_frame('{"event": "requestHelp"}')

    assert isinstance(message, RequestHelp)
    assert (message.lat, message.lng) == (None, None)


def test_parse_accept_help_reads_camel_case_field() -> None:
    message = parse_frame(
        '{"event": "acceptHelp", "data": {"requesterSessionId": "abc"}}'
    )

    assert isinstance(message, AcceptHelp)
    assert message.requester_session_id == "abc"


def test_parse_update_location_requires_coordinates() -> None:
    with pytest.raises(ProtocolError):
        parse_frame('{"event": "updateLocation", "data": {"lat": 1}}')

    message = parse_frame('{"event": "updateLocation", "data": {"lat": 1, "lng": 2}}')
    assert isinstance(message, UpdateLocation)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"data": {}}',
        '{"event": "launchRockets", "data": {}}',
        '{"event": "requestHelp", "data": [1, 2]}',
        '{"event": "registerGuardian", "data": {"lat": "north"}}',
    ],
)
def test_parse_rejects_malformed_frames(raw: str) -> None:
    with pytest.raises(ProtocolError):
        parse_frame(raw)


def test_guardian_list_envelope_is_a_bare_list() -> None:
    record = GuardianRecord(
        session_id="g1",
        alias="G1",
        lat=1.0,
        lng=2.0,
        updated_at=datetime(2024, 1, 1, tzinfo=UTC),
    )

    envelope = GuardianList.from_records([record]).envelope()

    assert envelope == {
        "event": "guardianList",
        "data": [
            {
                "sessionId": "g1",
                "alias": "G1",
                "lat": 1.0,
                "lng": 2.0,
                "updatedAt": 1704067200000,
            }
        ],
    }


def test_outbound_messages_use_camel_case_names() -> None:
    message = HelpAlreadyAssigned(requester_session_id="r")

    assert json.loads(message.to_json()) == {
        "event": "helpAlreadyAssigned",
        "data": {"requesterSessionId": "r", "assignedGuardianSessionId": None},
    }
