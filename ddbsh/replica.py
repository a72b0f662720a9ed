"""The command that adds, updates or removes replicas of a global table."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from .command import Command, ServiceError, Session, explain_string, failure


def _member_action(
    region: str,
    table_class: str | None,
    table_override: Mapping[str, Any] | None,
    gsi_spec: Iterable[Mapping[str, Any]] | None,
) -> dict:
    action: dict = {"RegionName": region}
    if table_class is not None:
        action["TableClassOverride"] = table_class
    if table_override is not None:
        action["ProvisionedThroughputOverride"] = dict(table_override)
    if gsi_spec is not None:
        action["GlobalSecondaryIndexes"] = [dict(index) for index in gsi_spec]
    return action


class UpdateTableReplicaCommand(Command):
    """Change the set of regions a table is replicated to."""

    def __init__(self, table_name: str) -> None:
        super().__init__()
        self.table_name = table_name
        self.delete: dict | None = None
        self.update: dict | None = None
        self.create: dict | None = None

    def delete_region(self, region: str) -> None:
        """Remove the replica in a region."""
        self.delete = {"RegionName": region}

    def add_region(
        self,
        region: str,
        table_class: str | None = None,
        table_override: Mapping[str, Any] | None = None,
        gsi_spec: Iterable[Mapping[str, Any]] | None = None,
    ) -> None:
        """Add a replica in a region."""
        self.create = _member_action(region, table_class, table_override, gsi_spec)

    def update_region(
        self,
        region: str,
        table_class: str | None = None,
        table_override: Mapping[str, Any] | None = None,
        gsi_spec: Iterable[Mapping[str, Any]] | None = None,
    ) -> None:
        """Change the settings of the replica in a region."""
        self.update = _member_action(region, table_class, table_override, gsi_spec)

    def _request(self) -> dict:
        replication: dict = {}
        if self.delete is not None:
            replication["Delete"] = self.delete
        if self.update is not None:
            replication["Update"] = self.update
        if self.create is not None:
            replication["Create"] = self.create
        return {"TableName": self.table_name, "ReplicaUpdates": [replication]}

    def run(self, session: Session) -> None:
        request = self._request()
        if self.explaining:
            session.emit(f"UpdateTable({explain_string(request)})")
            return
        try:
            session.client.update_table(request)
        except ServiceError as exc:
            raise failure("Update Table failed.", exc) from exc
        session.emit("ALTER")