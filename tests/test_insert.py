import io
import json

import pytest

from ddbsh.command import CommandError, ServiceError, Session
from ddbsh.insert import InsertCommand
from ddbsh.transact import TransactWriteCommand


class FakeClient:
    def __init__(self, put_error=None, attributes=None, missing=False):
        self.puts = []
        self.writes = []
        self.put_error = put_error
        self.attributes = attributes
        self.missing = missing

    def describe_table(self, request):
        if self.missing:
            raise ServiceError("ResourceNotFoundException", "gone", "r")
        return {
            "Table": {
                "TableName": request["TableName"],
                "KeySchema": [
                    {"AttributeName": "id", "KeyType": "HASH"},
                    {"AttributeName": "ts", "KeyType": "RANGE"},
                ],
            }
        }

    def put_item(self, request):
        self.puts.append(request)
        if self.put_error:
            raise self.put_error
        return {"Attributes": self.attributes} if self.attributes else {}

    def transact_write_items(self, request):
        self.writes.append(request)
        return {}


def make_session(client):
    session = Session(client)
    session.output = io.StringIO()
    return session


def lines(session):
    return session.output.getvalue().splitlines()


ROW_A = [{"S": "a"}, {"N": "1"}]
ROW_B = [{"S": "b"}, {"N": "2"}]


def test_insert_adds_not_exists_condition_on_partition_key():
    client = FakeClient()
    session = make_session(client)
    InsertCommand("t", ["id", "ts"], [ROW_A, ROW_B], True).run(session)
    assert lines(session) == ["INSERT", "INSERT"]
    assert [p["Item"] for p in client.puts] == [
        {"id": ROW_A[0], "ts": ROW_A[1]},
        {"id": ROW_B[0], "ts": ROW_B[1]},
    ]
    for put in client.puts:
        assert put["ConditionExpression"].startswith("attribute_not_exists(")
        (name,) = put["ExpressionAttributeNames"]
        assert put["ConditionExpression"] == f"attribute_not_exists({name})"
        assert put["ExpressionAttributeNames"][name] == "id"


def test_replace_has_no_condition():
    client = FakeClient()
    session = make_session(client)
    InsertCommand("t", ["id", "ts"], [ROW_A], False).run(session)
    assert lines(session) == ["REPLACE"]
    assert "ConditionExpression" not in client.puts[0]
    assert "ExpressionAttributeNames" not in client.puts[0]


def test_validate_rejects_unequal_rows():
    command = InsertCommand("t", ["id", "ts"], [ROW_A, [{"S": "c"}]], True)
    with pytest.raises(CommandError, match="tuple 2"):
        command.validate()


def test_run_with_invalid_rows_puts_nothing():
    client = FakeClient()
    session = make_session(client)
    with pytest.raises(CommandError):
        InsertCommand("t", ["id"], [ROW_A], True).run(session)
    assert client.puts == []


def test_return_values_are_printed():
    attributes = {"id": {"S": "a"}}
    client = FakeClient(attributes=attributes)
    session = make_session(client)
    InsertCommand("t", ["id", "ts"], [ROW_A], False, "ALL_OLD").run(session)
    assert client.puts[0]["ReturnValues"] == "ALL_OLD"
    (line,) = lines(session)
    prefix = "REPLACE: "
    assert line.startswith(prefix)
    assert json.loads(line[len(prefix):]) == attributes


def test_put_failure_raises():
    client = FakeClient(put_error=ServiceError("ConditionalCheckFailedException", "x", "r"))
    session = make_session(client)
    with pytest.raises(CommandError, match="INSERT failed"):
        InsertCommand("t", ["id", "ts"], [ROW_A], True).run(session)


def test_explain_prints_put_requests_only():
    client = FakeClient()
    session = make_session(client)
    command = InsertCommand("t", ["id", "ts"], [ROW_A], True)
    command.explain()
    command.run(session)
    assert client.puts == []
    (line,) = lines(session)
    assert line.startswith("PutItem(")
    payload = json.loads(line[len("PutItem("):-1])
    assert payload["TableName"] == "t"
    assert payload["Item"] == {"id": ROW_A[0], "ts": ROW_A[1]}


def test_txwrite_builds_put_items():
    session = make_session(FakeClient())
    items = InsertCommand("t", ["id", "ts"], [ROW_A, ROW_B], True).txwrite(session)
    assert len(items) == 2
    assert all(set(entry) == {"Put"} for entry in items)
    assert items[1]["Put"]["Item"] == {"id": ROW_B[0], "ts": ROW_B[1]}
    assert items[0]["Put"]["TableName"] == "t"
    assert "ConditionExpression" in items[0]["Put"]


def test_txwrite_returns_none_for_invalid_rows_or_missing_table():
    session = make_session(FakeClient())
    assert InsertCommand("t", ["id"], [ROW_A], True).txwrite(session) is None
    missing = make_session(FakeClient(missing=True))
    assert InsertCommand("t", ["id", "ts"], [ROW_A], True).txwrite(missing) is None


def test_insert_inside_write_transaction():
    client = FakeClient()
    session = make_session(client)
    tx = TransactWriteCommand(session, InsertCommand("t", ["id", "ts"], [ROW_A], False))
    tx.commit()
    tx.run(session)
    assert lines(session) == ["COMMIT"]
    assert client.writes[0]["TransactItems"][0]["Put"]["Item"] == {"id": ROW_A[0], "ts": ROW_A[1]}