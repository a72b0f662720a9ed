"""The DESCRIBE command: a readable summary of one table."""

from __future__ import annotations

from typing import Any, Mapping

from .command import (
    Command,
    ServiceError,
    Session,
    explain_string,
    failure,
    format_key_schema,
    format_timestamp,
)

_PROVISIONED = "PROVISIONED"
_PAY_PER_REQUEST = "PAY_PER_REQUEST"


def _throughput(description: Mapping[str, Any] | None) -> tuple[int, int]:
    description = description or {}
    return (
        int(description.get("ReadCapacityUnits", 0)),
        int(description.get("WriteCapacityUnits", 0)),
    )


def _basic_info(table: Mapping[str, Any]) -> list[str]:
    attributes = ", ".join(
        f" {attribute.get('AttributeName', '')}, {attribute.get('AttributeType', '')}"
        for attribute in table.get("AttributeDefinitions", [])
    )
    protection = "Enabled" if table.get("DeletionProtectionEnabled") else "Disabled"
    return [
        f"Name: {table.get('TableName', '')} ({table.get('TableStatus', '')})",
        f"Key: {format_key_schema(table.get('KeySchema', []))}",
        f"Attributes: {attributes}",
        f"Created at: {format_timestamp(table.get('CreationDateTime'))}",
        f"Table ARN: {table.get('TableArn', '')}",
        f"Table ID: {table.get('TableId', '')}",
        f"Table size (bytes): {int(table.get('TableSizeBytes', 0))}",
        f"Item Count: {int(table.get('ItemCount', 0))}",
        f"Deletion Protection: {protection}",
    ]


def _billing_mode(table: Mapping[str, Any]) -> tuple[list[str], bool]:
    """The billing mode lines and whether the table is on demand."""
    if "BillingModeSummary" in table:
        mode = table["BillingModeSummary"].get("BillingMode")
        if mode == _PROVISIONED:
            read, write = _throughput(table.get("ProvisionedThroughput"))
            return [f"Billing Mode: Provisioned ({read} RCU, {write} WCU)"], False
        if mode == _PAY_PER_REQUEST:
            return ["Billing Mode: On Demand"], True
        return [f"Unknown Billing mode {mode}."], False
    if "ProvisionedThroughput" in table:
        read, write = _throughput(table["ProvisionedThroughput"])
        return [f"Billing Mode: Provisioned ({read} RCU, {write} WCU)"], False
    return [], False


def _projection(projection: Mapping[str, Any]) -> str:
    kind = projection.get("ProjectionType", "")
    if kind == "INCLUDE":
        included = ", ".join(projection.get("NonKeyAttributes", []))
        return f"Projecting ({kind}) ({included})"
    return f"Projecting ({kind})"


def _gsi_lines(table: Mapping[str, Any], on_demand: bool) -> list[str]:
    if "GlobalSecondaryIndexes" not in table:
        return ["GSI: None"]
    lines = []
    for index in table["GlobalSecondaryIndexes"]:
        text = f"GSI {index.get('IndexName', '')}: ( {format_key_schema(index.get('KeySchema', []))} ), "
        if on_demand:
            text += "Billing Mode: On Demand (mirrors table), "
        else:
            read, write = _throughput(index.get("ProvisionedThroughput"))
            text += f" Provisioned ({read} RCU, {write} WCU), "
        if "Projection" in index:
            text += _projection(index["Projection"])
        text += f", Status: {index.get('IndexStatus', '')}"
        text += f", Backfilling: {'YES' if index.get('Backfilling') else 'NO'}"
        lines.append(text)
    return lines


def _lsi_lines(table: Mapping[str, Any]) -> list[str]:
    if "LocalSecondaryIndexes" not in table:
        return ["LSI: None"]
    return [
        "".join(
            f"LSI {index.get('IndexName', '')}: ( {format_key_schema(index.get('KeySchema', []))} ), "
            for index in table["LocalSecondaryIndexes"]
        )
    ]


def _stream_line(table: Mapping[str, Any]) -> str:
    stream = table.get("StreamSpecification")
    if not stream or not stream.get("StreamEnabled"):
        return "Stream: Disabled"
    return f"Stream: {stream.get('StreamViewType', '')}"


def _table_class_line(table: Mapping[str, Any]) -> str:
    if "TableClassSummary" in table:
        return f"Table Class: {table['TableClassSummary'].get('TableClass', '')}"
    return "Table Class: Has not been set."


def _sse_line(table: Mapping[str, Any]) -> str:
    if "SSEDescription" in table:
        return f"SSE: ({table['SSEDescription'].get('Status', '')})"
    return "SSE: Not set"


def _pitr_line(response: Mapping[str, Any]) -> str | None:
    description = response.get("ContinuousBackupsDescription", {}).get(
        "PointInTimeRecoveryDescription", {}
    )
    status = description.get("PointInTimeRecoveryStatus")
    if status == "ENABLED":
        earliest = format_timestamp(description.get("EarliestRestorableDateTime"))
        latest = format_timestamp(description.get("LatestRestorableDateTime"))
        return f"PITR is Enabled: [{earliest} to {latest}]"
    if status == "DISABLED":
        return "PITR is Disabled."
    return None


class DescribeCommand(Command):
    """Show a table's keys, billing, indexes, streams, backups and replicas."""

    def __init__(self, table_name: str) -> None:
        super().__init__()
        self.table_name = table_name

    def run(self, session: Session) -> None:
        client = session.client
        describe_request = {"TableName": self.table_name}
        if self.explaining:
            session.emit(f"DescribeTable({explain_string(describe_request)})")
        try:
            table = client.describe_table(describe_request).get("Table", {})
        except ServiceError as exc:
            raise failure(f'DescribeTable on "{self.table_name}" Failed.', exc) from exc

        name = table.get("TableName", self.table_name)
        on_demand = False
        if not self.explaining:
            for line in _basic_info(table):
                session.emit(line)
            billing_lines, on_demand = _billing_mode(table)
            for line in billing_lines:
                session.emit(line)

        pitr_request = {"TableName": name}
        if self.explaining:
            session.emit(f"DescribeContinuousBackups({explain_string(pitr_request)})")
        else:
            try:
                pitr_line = _pitr_line(client.describe_continuous_backups(pitr_request))
            except ServiceError:
                pitr_line = None
            if pitr_line is not None:
                session.emit(pitr_line)
            lines = [
                *_gsi_lines(table, on_demand),
                *_lsi_lines(table),
                _stream_line(table),
                _table_class_line(table),
                _sse_line(table),
            ]
            for line in lines:
                session.emit(line)

        scaling_request = {"TableName": name}
        if self.explaining:
            session.emit(f"DescribeTableReplicaAutoScaling({explain_string(scaling_request)})")
            return
        try:
            response = client.describe_table_replica_auto_scaling(scaling_request)
        except ServiceError:
            return
        for replica in response.get("TableAutoScalingDescription", {}).get("Replicas", []):
            session.emit(
                f"Replica Region: {replica.get('RegionName', '')} "
                f"(Status: {replica.get('ReplicaStatus', '')})"
            )