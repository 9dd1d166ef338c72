"""MySQL-backed device store."""

import logging
from typing import Any, List, Optional

import pymysql
from pymysql.cursors import DictCursor

from ventus.shared.database import DBConfig
from ventus.shared.exceptions import DeviceNotFoundError, StoreWriteError
from ventus.shared.models import ChildDevice, ParentDevice
from .base import DeviceStore

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS devices (
        id INT AUTO_INCREMENT PRIMARY KEY,
        parent_id INT NULL,
        name VARCHAR(128) NOT NULL,
        device_type VARCHAR(128) NOT NULL,
        enabled TINYINT(1) NOT NULL DEFAULT 1,
        INDEX idx_parent (parent_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS device_metadata (
        device_id INT NOT NULL,
        name VARCHAR(64) NOT NULL,
        value VARCHAR(255) NOT NULL,
        UNIQUE KEY uniq_device_name (device_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS device_attributes (
        device_id INT NOT NULL,
        name VARCHAR(64) NOT NULL,
        value VARCHAR(255) NULL,
        updated_at DATETIME NOT NULL,
        UNIQUE KEY uniq_device_name (device_id, name)
    )
    """,
)


class MySQLDeviceStore(DeviceStore):
    """Stores the station device, its children, metadata and attributes in MySQL."""

    def __init__(self, db_config: DBConfig):
        """Initialize store with database configuration.

        Args:
            db_config: Database connection configuration.
        """
        self.db_config = db_config
        self._connection: Optional[pymysql.Connection] = None

    def _get_connection(self) -> pymysql.Connection:
        """Get or create database connection."""
        if self._connection is None or not self._connection.open:
            self._connection = pymysql.connect(
                host=self.db_config.host,
                user=self.db_config.user,
                password=self.db_config.password,
                database=self.db_config.database,
                port=self.db_config.port,
                cursorclass=DictCursor,
            )
        return self._connection

    def _write(self, sql: str, params: tuple) -> int:
        """Execute a single write and commit it.

        Returns:
            The cursor's lastrowid.

        Raises:
            StoreWriteError: If connecting, the statement or the commit fails.
        """
        try:
            conn = self._get_connection()
            with conn.cursor() as cursor:
                cursor.execute(sql, params)
                row_id = cursor.lastrowid
            conn.commit()
            return row_id
        except pymysql.MySQLError as e:
            self._rollback()
            raise StoreWriteError(f"Write failed: {e}") from e

    def _rollback(self) -> None:
        """Roll back the open transaction, dropping the connection if that fails too."""
        if self._connection is None:
            return
        try:
            self._connection.rollback()
        except pymysql.MySQLError as e:
            logger.warning(f"Rollback failed, reconnecting on next use: {e}")
            self._connection = None

    def ensure_schema(self) -> None:
        """Create the device tables if they do not exist."""
        conn = self._get_connection()
        with conn.cursor() as cursor:
            for statement in SCHEMA:
                cursor.execute(statement)
        conn.commit()

    def get_parent(self, parent_id: int) -> ParentDevice:
        conn = self._get_connection()
        with conn.cursor() as cursor:
            cursor.execute(
                "SELECT id, name, enabled FROM devices WHERE id = %s",
                (parent_id,),
            )
            row = cursor.fetchone()

        if row is None:
            raise DeviceNotFoundError(f"Device {parent_id} not found")
        return ParentDevice(id=row["id"], name=row["name"], enabled=bool(row["enabled"]))

    def list_children(self, parent_id: int) -> List[ChildDevice]:
        conn = self._get_connection()
        with conn.cursor() as cursor:
            cursor.execute(
                """
                SELECT d.id, d.parent_id, d.name, d.device_type,
                       m.name AS meta_name, m.value AS meta_value
                FROM devices d
                LEFT JOIN device_metadata m ON m.device_id = d.id
                WHERE d.parent_id = %s
                ORDER BY d.id
                """,
                (parent_id,),
            )
            rows = cursor.fetchall()

        children = {}
        for row in rows:
            child = children.get(row["id"])
            if child is None:
                child = ChildDevice(
                    id=row["id"],
                    parent_id=row["parent_id"],
                    name=row["name"],
                    device_type=row["device_type"],
                )
                children[row["id"]] = child
            if row["meta_name"] is not None:
                child.metadata[row["meta_name"]] = row["meta_value"]
        return list(children.values())

    def create_child(self, parent_id: int, name: str, device_type: str) -> ChildDevice:
        child_id = self._write(
            "INSERT INTO devices (parent_id, name, device_type, enabled) VALUES (%s, %s, %s, 1)",
            (parent_id, name, device_type),
        )
        return ChildDevice(id=child_id, parent_id=parent_id, name=name, device_type=device_type)

    def set_metadata(self, device_id: int, key: str, value: str) -> None:
        self._write(
            """
            INSERT INTO device_metadata (device_id, name, value)
            VALUES (%s, %s, %s)
            ON DUPLICATE KEY UPDATE value = VALUES(value)
            """,
            (device_id, key, value),
        )

    def get_metadata(self, device_id: int, key: str) -> Optional[str]:
        conn = self._get_connection()
        with conn.cursor() as cursor:
            cursor.execute(
                "SELECT value FROM device_metadata WHERE device_id = %s AND name = %s",
                (device_id, key),
            )
            row = cursor.fetchone()
        return row["value"] if row else None

    def write_attribute(self, device_id: int, name: str, value: Any) -> None:
        self._write(
            """
            INSERT INTO device_attributes (device_id, name, value, updated_at)
            VALUES (%s, %s, %s, NOW())
            ON DUPLICATE KEY UPDATE
                value = VALUES(value),
                updated_at = NOW()
            """,
            (device_id, name, None if value is None else str(value)),
        )
        logger.debug(f"Device {device_id}: {name} = {value}")

    def close(self):
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
