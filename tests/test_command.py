import json
from datetime import datetime, timedelta, timezone

import pytest

from ddbsh.command import (
    Command,
    CommandError,
    ConnectCommand,
    QuitCommand,
    ServiceError,
    Session,
    explain_string,
    failure,
    format_key_schema,
    format_timestamp,
)


def test_service_error_fields():
    err = ServiceError("ResourceNotFoundException", "no table", "req-1")
    assert err.code == "ResourceNotFoundException"
    assert err.message == "no table"
    assert err.request_id == "req-1"
    assert "ResourceNotFoundException" in str(err)


def test_failure_message_includes_details():
    err = failure("Create Backup Failed.", ServiceError("Boom", "bad thing", "r9"))
    assert isinstance(err, CommandError)
    assert str(err) == "Create Backup Failed. Boom. r9.\n\tbad thing"


def test_explain_string_is_single_line_json():
    payload = {"TableName": "t", "Key": {"id": {"S": "a\nb"}}}
    text = explain_string(payload)
    assert "\n" not in text
    assert json.loads(text) == payload


def test_format_key_schema():
    schema = [
        {"AttributeName": "id", "KeyType": "HASH"},
        {"AttributeName": "ts", "KeyType": "RANGE"},
    ]
    assert format_key_schema(schema) == "HASH id, RANGE ts"
    assert format_key_schema([]) == ""


def test_format_timestamp_round_trip():
    moment = datetime(2022, 8, 15, 10, 30, 5, tzinfo=timezone.utc)
    text = format_timestamp(moment)
    assert text.endswith("Z")
    parsed = datetime.strptime(text, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
    assert parsed == moment


def test_format_timestamp_epoch_and_text_agree():
    moment = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert format_timestamp(moment.timestamp()) == format_timestamp(moment)
    assert format_timestamp(format_timestamp(moment)) == format_timestamp(moment)


def test_format_timestamp_converts_to_utc():
    offset = timezone(timedelta(hours=5))
    local = datetime(2023, 1, 2, 8, 0, 0, tzinfo=offset)
    assert format_timestamp(local) == format_timestamp(local.astimezone(timezone.utc))


def test_format_timestamp_none_is_epoch():
    assert format_timestamp(None) == "1970-01-01T00:00:00Z"


def test_format_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        format_timestamp("not a time")
    with pytest.raises(TypeError):
        format_timestamp([1, 2])


def test_connect_sets_region_and_endpoint(capsys):
    session = Session(object(), "us-east-1", "")
    ConnectCommand("eu-west-1", "http://localhost:8000").run(session)
    assert session.region == "eu-west-1"
    assert session.endpoint == "http://localhost:8000"
    assert capsys.readouterr().out == "CONNECT\n"


def test_quit_stops_session(capsys):
    session = Session(object())
    assert session.running is True
    QuitCommand().run(session)
    assert session.running is False
    assert capsys.readouterr().out == "QUIT\n"


def test_quit_explained(capsys):
    session = Session(object())
    cmd = QuitCommand()
    cmd.explain()
    cmd.run(session)
    out = capsys.readouterr().out.splitlines()
    assert out == ["QUIT", "There is no good reason to quit. It is inexplicable."]
    assert session.running is False