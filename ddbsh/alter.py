"""Commands that alter a table's settings and its time-to-live."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .command import Command, CommandError, ServiceError, Session, explain_string, failure
from .tables import BillingModeAndThroughput


class UpdateTableCommand(Command):
    """Change billing, encryption, class, stream, indexes or deletion protection of a table."""

    def __init__(
        self,
        table_name: str,
        *,
        billing: BillingModeAndThroughput | None = None,
        sse_specification: dict | None = None,
        table_class: str | None = None,
        stream_specification: dict | None = None,
        attribute_definitions: Iterable[Mapping[str, Any]] | None = None,
        gsi_updates: Mapping[str, Any] | Iterable[Mapping[str, Any]] | None = None,
        deletion_protection: bool | None = None,
    ) -> None:
        super().__init__()
        request: dict = {"TableName": table_name}
        if billing is not None:
            if billing.mode == "PROVISIONED" and billing.throughput is not None:
                request["ProvisionedThroughput"] = billing.throughput
            request["BillingMode"] = billing.mode
        if sse_specification is not None:
            request["SSESpecification"] = sse_specification
        if table_class is not None:
            request["TableClass"] = table_class
        if stream_specification is not None:
            request["StreamSpecification"] = stream_specification
        if attribute_definitions is not None:
            request["AttributeDefinitions"] = [dict(a) for a in attribute_definitions]
        if gsi_updates is not None:
            if isinstance(gsi_updates, Mapping):
                request["GlobalSecondaryIndexUpdates"] = [dict(gsi_updates)]
            else:
                request["GlobalSecondaryIndexUpdates"] = [dict(u) for u in gsi_updates]
        if deletion_protection is not None:
            request["DeletionProtectionEnabled"] = deletion_protection
        self.table_name = table_name
        self.request = request

    def run(self, session: Session) -> None:
        if self.explaining:
            session.emit(f"UpdateTable({explain_string(self.request)})")
            return
        try:
            session.client.update_table(self.request)
        except ServiceError as exc:
            raise failure("Update Table failed.", exc) from exc
        session.emit("ALTER")


class UpdateTableTTLCommand(Command):
    """Enable time-to-live on an attribute, or disable it."""

    def __init__(self, table_name: str, enabled: bool, attribute: str = "") -> None:
        super().__init__()
        self.table_name = table_name
        self.enabled = enabled
        self.attribute = attribute

    def run(self, session: Session) -> None:
        client = session.client
        try:
            response = client.describe_time_to_live({"TableName": self.table_name})
        except ServiceError as exc:
            raise failure(f'DescribeTimeToLive on "{self.table_name}" Failed.', exc) from exc
        current = response.get("TimeToLiveDescription", {})

        if current.get("TimeToLiveStatus") == "DISABLED" and not self.enabled:
            session.emit("ALTER")
            return

        attribute = self.attribute if self.enabled else current.get("AttributeName", "")
        if self.enabled and not attribute:
            raise CommandError("Enabling TTL needs an attribute name.")
        request = {
            "TableName": self.table_name,
            "TimeToLiveSpecification": {"Enabled": self.enabled, "AttributeName": attribute},
        }
        if self.explaining:
            session.emit(f"UpdateTimeToLive({explain_string(request)})")
            return
        try:
            client.update_time_to_live(request)
        except ServiceError as exc:
            raise failure("Error updating TTL.", exc) from exc
        session.emit("ALTER")