"""The SHOW CREATE TABLE command: a CREATE TABLE statement that rebuilds a table."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .command import Command, CommandError, ServiceError, Session, explain_string, failure
from .tables import table_exists

_ATTRIBUTE_TYPES = {"S": "string", "N": "number", "B": "binary"}

_STREAM_VIEWS = {
    "NEW_IMAGE": "STREAM ( NEW IMAGE ) ",
    "OLD_IMAGE": "STREAM ( OLD IMAGE ) ",
    "KEYS_ONLY": "STREAM ( KEYS ONLY ) ",
    "NEW_AND_OLD_IMAGES": "STREAM ( BOTH IMAGES ) ",
}

_TABLE_CLASSES = {
    "STANDARD": "TABLE CLASS STANDARD ",
    "STANDARD_INFREQUENT_ACCESS": "TABLE CLASS STANDARD INFREQUENT ACCESS ",
}

_ON_DEMAND = "BILLING MODE ON DEMAND "


def _key_description(schema: Iterable[Mapping[str, Any]]) -> str:
    return ", ".join(
        f'"{element.get("AttributeName", "")}" {element.get("KeyType", "")}' for element in schema
    )


def _provisioned(throughput: Mapping[str, Any] | None) -> str:
    throughput = throughput or {}
    read = int(throughput.get("ReadCapacityUnits", 0))
    write = int(throughput.get("WriteCapacityUnits", 0))
    return f"BILLING MODE PROVISIONED ( {read} RCU, {write} WCU ) "


def _projection(table_name: str, index: Mapping[str, Any]) -> str:
    projection = index.get("Projection", {})
    kind = projection.get("ProjectionType")
    if kind == "ALL":
        return "PROJECTING ALL"
    if kind == "KEYS_ONLY":
        return "PROJECTING KEYS ONLY"
    if kind == "INCLUDE":
        included = ", ".join(projection.get("NonKeyAttributes", []))
        return f"PROJECTING INCLUDE ({included})"
    raise CommandError(f"Unknown projection in {table_name}.{index.get('IndexName', '')}.")


def _index_head(table_name: str, index: Mapping[str, Any]) -> str:
    return (
        f'"{index.get("IndexName", "")}" ON ( {_key_description(index.get("KeySchema", []))} ) '
        f"{_projection(table_name, index)} "
    )


def _gsis(table_name: str, gsis: list, on_demand: bool) -> str:
    if not gsis:
        return ""
    entries = [
        _index_head(table_name, index)
        + (_ON_DEMAND if on_demand else _provisioned(index.get("ProvisionedThroughput")))
        for index in gsis
    ]
    return "GSI (" + ", ".join(entries) + ") "


def _lsis(table_name: str, lsis: list) -> str:
    if not lsis:
        return ""
    return "LSI (" + ", ".join(_index_head(table_name, index) for index in lsis) + ") "


def _stream(stream: Mapping[str, Any]) -> str:
    if not stream.get("StreamEnabled"):
        return "STREAM DISABLED "
    try:
        return _STREAM_VIEWS[stream.get("StreamViewType")]
    except KeyError:
        raise CommandError("Unknown stream projection type.") from None


def create_table_statement(
    table: Mapping[str, Any], not_exists: bool = False, nowait: bool = False
) -> str:
    """Build the CREATE TABLE statement that describes a table description."""
    name = table.get("TableName", "")
    parts = ["CREATE TABLE "]
    if not_exists:
        parts.append("IF NOT EXISTS ")
    if nowait:
        parts.append("NOWAIT ")
    parts.append(f'"{name}" (')

    columns = []
    for definition in table.get("AttributeDefinitions", []):
        kind = _ATTRIBUTE_TYPES.get(definition.get("AttributeType"))
        if kind is None:
            raise CommandError("The table has an invalid data type.")
        columns.append(f'"{definition.get("AttributeName", "")}" {kind}')
    parts.append(", ".join(columns))

    parts.append(") PRIMARY KEY (")
    parts.append(_key_description(table.get("KeySchema", [])))
    parts.append(") ")

    on_demand = False
    if "BillingModeSummary" in table:
        mode = table["BillingModeSummary"].get("BillingMode")
        if mode == "PROVISIONED":
            parts.append(_provisioned(table.get("ProvisionedThroughput")))
        elif mode == "PAY_PER_REQUEST":
            parts.append(_ON_DEMAND)
            on_demand = True
        else:
            raise CommandError(f"Unknown Billing mode {mode}.")
    elif "ProvisionedThroughput" in table:
        parts.append(_provisioned(table["ProvisionedThroughput"]))

    parts.append(_gsis(name, table.get("GlobalSecondaryIndexes", []), on_demand))
    parts.append(_lsis(name, table.get("LocalSecondaryIndexes", [])))

    if "StreamSpecification" in table:
        parts.append(_stream(table["StreamSpecification"]))

    table_class = table.get("TableClassSummary", {}).get("TableClass")
    try:
        parts.append(_TABLE_CLASSES[table_class])
    except KeyError:
        raise CommandError("Unknown table class.") from None

    if table.get("DeletionProtectionEnabled"):
        parts.append("DELETION PROTECTION ENABLED")
    else:
        parts.append("DELETION PROTECTION DISABLED")
    return "".join(parts)


class ShowCreateTableCommand(Command):
    """Print a CREATE TABLE statement that would recreate an existing table."""

    def __init__(self, not_exists: bool, nowait: bool, table_name: str) -> None:
        super().__init__()
        self.not_exists = not_exists
        self.nowait = nowait
        self.table_name = table_name

    def run(self, session: Session) -> None:
        client = session.client
        if not table_exists(client, self.table_name):
            raise CommandError(f'The table "{self.table_name}" does not exist.')

        request = {"TableName": self.table_name}
        if self.explaining:
            session.emit(f"DescribeTable({explain_string(request)})")
        try:
            table = client.describe_table(request).get("Table", {})
        except ServiceError as exc:
            raise failure(f'DescribeTable on "{self.table_name}" Failed.', exc) from exc

        if table.get("TableStatus") != "ACTIVE":
            raise CommandError(f'The table "{self.table_name}" is not ACTIVE.')

        session.emit(create_table_statement(table, self.not_exists, self.nowait))