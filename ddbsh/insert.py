"""The INSERT and REPLACE commands, which put whole items into a table."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .command import Command, CommandError, ServiceError, Session, explain_string, failure

_PK_NAME = "#pk"


def _partition_key(session: Session, table_name: str) -> str:
    try:
        table = session.client.describe_table({"TableName": table_name}).get("Table", {})
    except ServiceError as exc:
        raise failure(f'DescribeTable on "{table_name}" Failed.', exc) from exc
    for element in table.get("KeySchema", []):
        if element.get("KeyType") == "HASH":
            return element.get("AttributeName", "")
    raise CommandError(f'The table "{table_name}" has no partition key.')


class InsertCommand(Command):
    """Put rows of values into a table; INSERT refuses to overwrite, REPLACE does not."""

    def __init__(
        self,
        table_name: str,
        columns: Iterable[str],
        rows: Iterable[Sequence[Any]],
        insert: bool = True,
        return_values: str = "NONE",
    ) -> None:
        super().__init__()
        self.table_name = table_name
        self.columns = list(columns)
        self.rows = [list(row) for row in rows]
        self.insert = insert
        self.return_values = return_values

    @property
    def operation(self) -> str:
        return "INSERT" if self.insert else "REPLACE"

    def validate(self) -> None:
        """Check that every row has one value per column."""
        width = len(self.columns)
        for number, row in enumerate(self.rows, start=1):
            if len(row) != width:
                raise CommandError(
                    f"Unequal number of column names ({width}) and values ({len(row)}) "
                    f"in tuple {number}"
                )

    def _put_request(self, pk: str, row: Sequence[Any]) -> dict:
        request: dict = {"TableName": self.table_name, "Item": dict(zip(self.columns, row))}
        if self.return_values != "NONE":
            request["ReturnValues"] = self.return_values
        if self.insert:
            request["ConditionExpression"] = f"attribute_not_exists({_PK_NAME})"
            request["ExpressionAttributeNames"] = {_PK_NAME: pk}
        return request

    def run(self, session: Session) -> None:
        pk = _partition_key(session, self.table_name)
        self.validate()
        op = self.operation
        for row in self.rows:
            request = self._put_request(pk, row)
            if self.explaining:
                session.emit(f"PutItem({explain_string(request)})")
                continue
            try:
                response = session.client.put_item(request)
            except ServiceError as exc:
                raise failure(f"{op} failed.", exc) from exc
            if self.return_values != "NONE":
                session.emit(f"{op}: {explain_string(response.get('Attributes', {}))}")
            else:
                session.emit(op)

    def txwrite(self, session: Session) -> list[dict] | None:
        try:
            pk = _partition_key(session, self.table_name)
            self.validate()
        except CommandError:
            return None
        items = []
        for row in self.rows:
            request = self._put_request(pk, row)
            put = {"Item": request["Item"], "TableName": request["TableName"]}
            for field in ("ConditionExpression", "ExpressionAttributeNames"):
                if request.get(field):
                    put[field] = request[field]
            items.append({"Put": put})
        return items