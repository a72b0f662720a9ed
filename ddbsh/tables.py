"""Commands that create, drop and list tables, and report account limits."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .command import Command, CommandError, ServiceError, Session, explain_string, failure

_PAGE_SIZE = 100
_NOT_FOUND = "ResourceNotFoundException"
_PROVISIONED = "PROVISIONED"
_PAY_PER_REQUEST = "PAY_PER_REQUEST"


def table_exists(client: Any, table_name: str) -> bool:
    """Whether the service knows a table of this name."""
    try:
        client.describe_table({"TableName": table_name})
    except ServiceError as exc:
        if exc.code == _NOT_FOUND:
            return False
        raise
    return True


def wait_for_table_active(client: Any, table_name: str, poll_interval: float = 1.0) -> None:
    """Block until the table reports the ACTIVE status."""
    while True:
        response = client.describe_table({"TableName": table_name})
        if response.get("Table", {}).get("TableStatus") == "ACTIVE":
            return
        time.sleep(poll_interval)


def wait_for_table_gone(client: Any, table_name: str, poll_interval: float = 1.0) -> None:
    """Block until the table can no longer be found."""
    while table_exists(client, table_name):
        time.sleep(poll_interval)


def _describe(client: Any, table_name: str) -> tuple[dict | None, dict | None]:
    """Fetch the table description and its time-to-live description, if available."""
    try:
        table = client.describe_table({"TableName": table_name}).get("Table", {})
    except ServiceError:
        return None, None
    try:
        ttl = client.describe_time_to_live({"TableName": table_name}).get(
            "TimeToLiveDescription", {}
        )
    except ServiceError:
        ttl = None
    return table, ttl


def _list_table_pages(session: Session, explaining: bool, follow_in_explain: bool):
    """Yield the table names of each page of a table listing."""
    request: dict = {"Limit": _PAGE_SIZE}
    while True:
        if explaining:
            session.emit(f"ListTables({explain_string(request)})")
        try:
            response = session.client.list_tables(dict(request))
        except ServiceError as exc:
            raise failure("ListTables Failed.", exc) from exc
        yield response.get("TableNames", [])
        if explaining and not follow_in_explain:
            return
        next_name = response.get("LastEvaluatedTableName", "")
        if not next_name:
            return
        request["ExclusiveStartTableName"] = next_name


@dataclass
class BillingModeAndThroughput:
    """A billing mode and, for provisioned tables, the provisioned throughput."""

    mode: str = _PAY_PER_REQUEST
    throughput: dict | None = None


class CreateTableCommand(Command):
    """Create a table, optionally only when it does not already exist."""

    def __init__(
        self,
        table_name: str,
        if_not_exists: bool = False,
        nowait: bool = False,
        attribute_definitions: Iterable[Mapping[str, Any]] = (),
        key_schema: Iterable[Mapping[str, Any]] = (),
        billing: BillingModeAndThroughput | None = None,
        gsi_list: list[dict] | None = None,
        lsi_list: list[dict] | None = None,
        stream_specification: dict | None = None,
        sse_specification: dict | None = None,
        table_class: str | None = None,
        deletion_protection: bool = False,
        tags: list[dict] | None = None,
    ) -> None:
        super().__init__()
        self.table_name = table_name
        self.if_not_exists = if_not_exists
        self.nowait = nowait
        self.attribute_definitions = [dict(a) for a in attribute_definitions]
        self.key_schema = [dict(k) for k in key_schema]
        self.billing = billing
        self.gsi_list = gsi_list
        self.lsi_list = lsi_list
        self.stream_specification = stream_specification
        self.sse_specification = sse_specification
        self.table_class = table_class
        self.deletion_protection = deletion_protection
        self.tags = tags

    def _request(self) -> dict:
        request: dict = {
            "TableName": self.table_name,
            "AttributeDefinitions": self.attribute_definitions,
            "KeySchema": self.key_schema,
        }
        if self.billing is not None:
            request["BillingMode"] = self.billing.mode
            if self.billing.mode == _PROVISIONED and self.billing.throughput is not None:
                request["ProvisionedThroughput"] = self.billing.throughput
        else:
            request["BillingMode"] = _PAY_PER_REQUEST
        if self.gsi_list is not None:
            request["GlobalSecondaryIndexes"] = self.gsi_list
        if self.lsi_list is not None:
            request["LocalSecondaryIndexes"] = self.lsi_list
        if self.stream_specification is not None:
            request["StreamSpecification"] = self.stream_specification
        if self.sse_specification is not None:
            request["SSESpecification"] = self.sse_specification
        if self.table_class is not None:
            request["TableClass"] = self.table_class
        request["DeletionProtectionEnabled"] = self.deletion_protection
        if self.tags is not None:
            request["Tags"] = self.tags
        return request

    def run(self, session: Session) -> None:
        client = session.client
        if not (self.if_not_exists and table_exists(client, self.table_name)):
            request = self._request()
            if self.explaining:
                session.emit(f"CreateTable({explain_string(request)})")
            else:
                try:
                    client.create_table(request)
                except ServiceError as exc:
                    raise failure(f"Error creating table {self.table_name}.", exc) from exc
                if not self.nowait:
                    wait_for_table_active(client, self.table_name)
        session.emit("CREATE")


class DropTableCommand(Command):
    """Delete a table, optionally only when it exists."""

    def __init__(self, table_name: str, if_exists: bool = False, nowait: bool = False) -> None:
        super().__init__()
        self.table_name = table_name
        self.if_exists = if_exists
        self.nowait = nowait

    def run(self, session: Session) -> None:
        client = session.client
        if self.if_exists and not table_exists(client, self.table_name):
            return
        request = {"TableName": self.table_name}
        if self.explaining:
            session.emit(f"DeleteTable({explain_string(request)})")
            return
        try:
            client.delete_table(request)
        except ServiceError as exc:
            raise failure("Drop Table Failed.", exc) from exc
        if not self.nowait:
            wait_for_table_gone(client, self.table_name)
        session.emit("DROP")


def _table_summary(name: str, table: Mapping[str, Any], ttl: Mapping[str, Any]) -> str:
    ttl_status = ttl.get("TimeToLiveStatus", "")
    ttl_text = ttl_status
    if ttl_status in ("ENABLED", "ENABLING"):
        ttl_text += f" ({ttl.get('AttributeName', '')})"

    if "BillingModeSummary" in table:
        billing_mode = table["BillingModeSummary"].get("BillingMode", "")
    elif "ProvisionedThroughput" in table:
        billing_mode = _PROVISIONED
    else:
        billing_mode = _PAY_PER_REQUEST + "*"

    if "TableClassSummary" in table:
        table_class = table["TableClassSummary"].get("TableClass", "")
    else:
        table_class = "STANDARD*"

    return (
        f"{name} | {table.get('TableStatus', '')} | {billing_mode} | {table_class} | "
        f"{table.get('TableId', '')} | {table.get('TableArn', '')} | "
        f"TTL {ttl_text} | GSI: {len(table.get('GlobalSecondaryIndexes', []))} | "
        f"LSI : {len(table.get('LocalSecondaryIndexes', []))} |"
    )


class ShowTablesCommand(Command):
    """List tables, optionally filtered by a regular expression over the whole name."""

    def __init__(self, brief: bool = False, regexp: str | None = None) -> None:
        super().__init__()
        self.brief = brief
        self.regexp = regexp or ""

    def run(self, session: Session) -> None:
        try:
            pattern = re.compile(self.regexp) if self.regexp else None
        except re.error as exc:
            raise CommandError(f"Invalid regular expression {self.regexp!r}: {exc}") from exc

        for names in _list_table_pages(session, self.explaining, follow_in_explain=False):
            if self.explaining:
                continue
            for name in names:
                if pattern is not None and not pattern.fullmatch(name):
                    continue
                if self.brief:
                    session.emit(name)
                    continue
                table, ttl = _describe(session.client, name)
                if table is not None and ttl is not None:
                    session.emit(_table_summary(name, table, ttl))
                else:
                    session.emit(name)


def _capacity(throughput: Mapping[str, Any] | None) -> tuple[int, int]:
    throughput = throughput or {}
    return (
        int(throughput.get("ReadCapacityUnits", 0)),
        int(throughput.get("WriteCapacityUnits", 0)),
    )


class ShowLimitsCommand(Command):
    """Show account limits and the capacity provisioned across all tables."""

    def run(self, session: Session) -> None:
        client = session.client
        request: dict = {}
        if self.explaining:
            session.emit(f"DescribeLimits({explain_string(request)})")
        else:
            try:
                limits = client.describe_limits(request)
            except ServiceError as exc:
                raise failure("DescribeLimits Failed.", exc) from exc
            session.emit(f"Region: {session.region}")
            session.emit(
                f"Account Max (RCU, WCU): {int(limits.get('AccountMaxReadCapacityUnits', 0))}, "
                f"{int(limits.get('AccountMaxWriteCapacityUnits', 0))}"
            )
            session.emit(
                f"Table Max (RCU, WCU):  {int(limits.get('TableMaxReadCapacityUnits', 0))}, "
                f"{int(limits.get('TableMaxWriteCapacityUnits', 0))}"
            )

        rcus = wcus = gsi_rcus = gsi_wcus = 0
        for names in _list_table_pages(session, self.explaining, follow_in_explain=True):
            if self.explaining:
                continue
            for name in names:
                table, _ = _describe(client, name)
                if table is None:
                    continue
                provisioned = (
                    table.get("BillingModeSummary", {}).get("BillingMode") == _PROVISIONED
                    if "BillingModeSummary" in table
                    else False
                ) or "ProvisionedThroughput" in table
                if not provisioned:
                    continue
                read, write = _capacity(table.get("ProvisionedThroughput"))
                rcus += read
                wcus += write
                for gsi in table.get("GlobalSecondaryIndexes", []):
                    read, write = _capacity(gsi.get("ProvisionedThroughput"))
                    gsi_rcus += read
                    gsi_wcus += write

        if not self.explaining:
            session.emit(f"Total Tables (RCU, WCU): {rcus}, {wcus}")
            session.emit(f"Total GSI (RCU, WCU): {gsi_rcus}, {gsi_wcus}")
            session.emit(f"Total (RCU, WCU): {rcus + gsi_rcus}, {wcus + gsi_wcus}")