from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from models import EmployeeRecord
from models.enrichment_outcome import PERMANENT_REASONS


EMPLOYEE_COLUMNS = tuple(name for name in EmployeeRecord.model_fields if name != "id")

# Columns the sweep is allowed to touch
_ENRICHMENT_COLUMNS = ("education", "job_history", "skills", "is_enriched", "enrichment_outcome", "last_enriched_at")


def _row_to_employee(row: sqlite3.Row) -> EmployeeRecord:
    data = dict(row)
    # Older rows may carry NULL flags
    data["is_enriched"] = bool(data.get("is_enriched") or 0)
    data["suppressed"] = bool(data.get("suppressed") or 0)
    return EmployeeRecord.model_validate(data)


class EmployeesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, employee_id: int) -> Optional[EmployeeRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM employees WHERE id = ?", (employee_id,))
        row = cur.fetchone()
        return _row_to_employee(row) if row else None

    def get_by_linkedin_url(self, linkedin_url: Optional[str]) -> Optional[EmployeeRecord]:
        if not linkedin_url:
            return None
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM employees WHERE linkedin_url = ?", (linkedin_url,))
        row = cur.fetchone()
        return _row_to_employee(row) if row else None

    def save(self, record: EmployeeRecord) -> int:
        """Write every column of ``record`` keyed on linkedin_url; returns the row id.

        An existing row keeps its id; all of its columns take the new values.
        Callers decide what the new values are (see services.merge).
        """
        values = record.model_dump(include=set(EMPLOYEE_COLUMNS))
        placeholders = ", ".join("?" for _ in EMPLOYEE_COLUMNS)
        assignments = ", ".join(f"{col} = excluded.{col}" for col in EMPLOYEE_COLUMNS)
        sql = (
            f"INSERT INTO employees ({', '.join(EMPLOYEE_COLUMNS)}) VALUES ({placeholders}) "
            f"ON CONFLICT(linkedin_url) DO UPDATE SET {assignments} "
            "RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, tuple(values[col] for col in EMPLOYEE_COLUMNS))
        # Drain RETURNING so the statement is finished before COMMIT
        rows = cur.fetchall()
        return int(rows[0][0])

    def update_enrichment(self, employee_id: int, fields: Dict[str, Any]) -> None:
        """Targeted update of enrichment columns by primary key; other columns untouched."""
        columns = []
        values: List[Any] = []
        for key in _ENRICHMENT_COLUMNS:
            if key in fields:
                columns.append(f"{key} = ?")
                values.append(fields[key])
        if not columns:
            return
        values.append(employee_id)
        self.conn.execute(f"UPDATE employees SET {', '.join(columns)} WHERE id = ?;", tuple(values))

    def select_unenriched(self, limit: Optional[int] = None, skip_rejected: bool = False) -> List[EmployeeRecord]:
        """Employees whose is_enriched flag is unset or 0, in id order."""
        sql = "SELECT * FROM employees WHERE (is_enriched IS NULL OR is_enriched = 0)"
        params: List[Any] = []
        if skip_rejected:
            tags = sorted(reason.value for reason in PERMANENT_REASONS)
            sql += f" AND (enrichment_outcome IS NULL OR enrichment_outcome NOT IN ({', '.join('?' for _ in tags)}))"
            params.extend(tags)
        sql += " ORDER BY id"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        cur = self.conn.cursor()
        cur.execute(sql, tuple(params))
        return [_row_to_employee(r) for r in cur.fetchall()]

    def count_all(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM employees").fetchone()[0])

    def count_enriched(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM employees WHERE is_enriched = 1").fetchone()[0])

