"""Commands that create, drop, restore, describe and list table backups."""

from __future__ import annotations

from .command import (
    Command,
    ServiceError,
    Session,
    explain_string,
    failure,
    format_key_schema,
    format_timestamp,
)

_BACKUP_TYPE_FILTERS = frozenset({"USER", "SYSTEM", "AWS_BACKUP", "ALL"})
_PAGE_SIZE = 100


class CreateBackupCommand(Command):
    """Create an on-demand backup of a table."""

    def __init__(self, table_name: str, backup_name: str) -> None:
        super().__init__()
        self.table_name = table_name
        self.backup_name = backup_name

    def run(self, session: Session) -> None:
        request = {"TableName": self.table_name, "BackupName": self.backup_name}
        if self.explaining:
            session.emit(f"CreateBackup({explain_string(request)})")
            return
        try:
            session.client.create_backup(request)
        except ServiceError as exc:
            raise failure("Create Backup Failed.", exc) from exc
        session.emit("BACKUP")


class DropBackupCommand(Command):
    """Delete a backup by its ARN."""

    def __init__(self, backup_arn: str) -> None:
        super().__init__()
        self.backup_arn = backup_arn

    def run(self, session: Session) -> None:
        request = {"BackupArn": self.backup_arn}
        if self.explaining:
            session.emit(f"DescribeBackup({explain_string(request)})")
            return
        try:
            session.client.delete_backup(request)
        except ServiceError as exc:
            raise failure("Drop Backup Failed.", exc) from exc
        session.emit("DROP BACKUP")


class RestoreBackupCommand(Command):
    """Restore a backup into a new table."""

    def __init__(self, table_name: str, backup_arn: str) -> None:
        super().__init__()
        self.table_name = table_name
        self.backup_arn = backup_arn

    def run(self, session: Session) -> None:
        request = {"TargetTableName": self.table_name, "BackupArn": self.backup_arn}
        if self.explaining:
            session.emit(f"RestoreTableFromBackup({explain_string(request)})")
            return
        try:
            session.client.restore_table_from_backup(request)
        except ServiceError as exc:
            raise failure("Restore Backup Failed.", exc) from exc
        session.emit("RESTORE")


class DescribeBackupCommand(Command):
    """Show the details of one backup."""

    def __init__(self, backup_arn: str) -> None:
        super().__init__()
        self.backup_arn = backup_arn

    def run(self, session: Session) -> None:
        request = {"BackupArn": self.backup_arn}
        if self.explaining:
            session.emit(f"DescribeBackup({explain_string(request)})")
            return
        try:
            response = session.client.describe_backup(request)
        except ServiceError as exc:
            raise failure(f'DescribeBackup on "{self.backup_arn}" Failed.', exc) from exc

        description = response.get("BackupDescription", {})
        source = description.get("SourceTableDetails", {})
        details = description.get("BackupDetails", {})

        lines = [
            f"Table Name: {source.get('TableName', '')}",
            f"Tabld Id: {source.get('TableId', '')}",
            f"Table Arn: {source.get('TableArn', '')}",
            f"Table Size (bytes): {int(source.get('TableSizeBytes', 0))}",
            f"Item Count: {int(source.get('ItemCount', 0))}",
            f"Table Key: ( {format_key_schema(source.get('KeySchema', []))} )",
            f"Table Creation Date/Time: {format_timestamp(source.get('TableCreationDateTime'))}",
        ]
        if "BillingMode" in source:
            lines.append(f"Billing Mode: {source['BillingMode']}")
        if "ProvisionedThroughput" in source:
            throughput = source["ProvisionedThroughput"]
            lines.append(
                f"Provisioned Throughput: {int(throughput.get('ReadCapacityUnits', 0))} RCU, "
                f"{int(throughput.get('WriteCapacityUnits', 0))} WCU"
            )
        lines += [
            f"Backup Name: {details.get('BackupName', '')}",
            f"Backup Arn: {details.get('BackupArn', '')}",
            f"Backup Size (bytes): {int(details.get('BackupSizeBytes', 0))}",
            f"Backup Status: {details.get('BackupStatus', '')}",
            f"Backup Type: {details.get('BackupType', '')}",
            f"Backup Creation Date/Time: {format_timestamp(details.get('BackupCreationDateTime'))}",
            f"Backup Expiry Date/Time: {format_timestamp(details.get('BackupExpiryDateTime'))}",
        ]
        for line in lines:
            session.emit(line)


class ShowBackupsCommand(Command):
    """List backups, optionally filtered by type and table."""

    def __init__(self, backup_type: str = "", table_name: str = "") -> None:
        super().__init__()
        self.backup_type = backup_type
        self.table_name = table_name

    def _base_request(self) -> dict:
        request: dict = {}
        if self.table_name:
            request["TableName"] = self.table_name
        if self.backup_type in _BACKUP_TYPE_FILTERS:
            request["BackupType"] = self.backup_type
        request["Limit"] = _PAGE_SIZE
        return request

    def run(self, session: Session) -> None:
        request = self._base_request()
        while True:
            if self.explaining:
                session.emit(f"ListBackups({explain_string(request)})")
            try:
                response = session.client.list_backups(dict(request))
            except ServiceError as exc:
                raise failure("ListBackups Failed.", exc) from exc

            if not self.explaining:
                for summary in response.get("BackupSummaries", []):
                    session.emit(
                        f"Table: {summary.get('TableName', '')}, "
                        f"Backup: {summary.get('BackupName', '')}, "
                        f"Status: {summary.get('BackupStatus', '')}, "
                        f"ARN: {summary.get('BackupArn', '')}, "
                        f"On: {format_timestamp(summary.get('BackupCreationDateTime'))}, "
                        f"Expires: {format_timestamp(summary.get('BackupExpiryDateTime'))}"
                    )

            next_arn = response.get("LastEvaluatedBackupArn", "")
            if not next_arn:
                break
            request["ExclusiveStartBackupArn"] = next_arn