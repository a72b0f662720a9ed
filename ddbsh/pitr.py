"""Commands that switch point-in-time recovery and restore a table to a point in time."""

from __future__ import annotations

from datetime import datetime, timezone

from .command import Command, ServiceError, Session, explain_string, failure, format_timestamp

_ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class UpdatePITRCommand(Command):
    """Enable or disable point-in-time recovery on a table."""

    def __init__(self, table_name: str, enabled: bool) -> None:
        super().__init__()
        self.table_name = table_name
        self.enabled = enabled

    def run(self, session: Session) -> None:
        request = {
            "TableName": self.table_name,
            "PointInTimeRecoverySpecification": {"PointInTimeRecoveryEnabled": self.enabled},
        }
        if self.explaining:
            session.emit(f"UpdateContinuousBackupsRequest({explain_string(request)})")
            return
        try:
            session.client.update_continuous_backups(request)
        except ServiceError as exc:
            raise failure("Setting PITR failed.", exc) from exc
        session.emit("ALTER")


class RestorePITRCommand(Command):
    """Restore a table, as it was at a point in time, into a new table."""

    def __init__(self, table_name: str, timestamp: str, target_name: str) -> None:
        super().__init__()
        self.table_name = table_name
        self.target_name = target_name
        self.point_in_time = datetime.strptime(format_timestamp(timestamp), _ISO_FORMAT).replace(
            tzinfo=timezone.utc
        )

    def run(self, session: Session) -> None:
        request = {
            "SourceTableName": self.table_name,
            "TargetTableName": self.target_name,
            "RestoreDateTime": int(self.point_in_time.timestamp()),
        }
        if self.explaining:
            session.emit(f"RestoreTableToPointInTimeRequest({explain_string(request)})")
            return
        try:
            session.client.restore_table_to_point_in_time(request)
        except ServiceError as exc:
            raise failure("Restore to point in time failed.", exc) from exc
        session.emit("RESTORE")