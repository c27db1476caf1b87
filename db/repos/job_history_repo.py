from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List


class JobHistoryRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def replace_for_employee(self, employee_id: int, entries: Iterable[Dict[str, Any]]) -> int:
        """Drop the employee's job-history rows and insert ``entries`` in order.

        Each entry carries company_name, title, start_date, end_date, is_current
        and optionally company_id. Returns the number of rows written.
        """
        self.conn.execute("DELETE FROM employee_job_history WHERE employee_id = ?", (employee_id,))
        written = 0
        for position, entry in enumerate(entries):
            self.conn.execute(
                (
                    "INSERT INTO employee_job_history "
                    "(employee_id, company_id, company_name, title, start_date, end_date, is_current, position) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
                ),
                (
                    employee_id,
                    entry.get("company_id"),
                    entry.get("company_name"),
                    entry.get("title"),
                    entry.get("start_date"),
                    entry.get("end_date"),
                    1 if entry.get("is_current") else 0,
                    position,
                ),
            )
            written += 1
        return written

    def list_for_employee(self, employee_id: int) -> List[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(
            (
                "SELECT company_id, company_name, title, start_date, end_date, is_current, position "
                "FROM employee_job_history WHERE employee_id = ? ORDER BY position"
            ),
            (employee_id,),
        )
        return [dict(r) for r in cur.fetchall()]

    def find_shared_employers(self, employee_id: int) -> List[Dict[str, Any]]:
        """Other employees who list a past employer in common with ``employee_id``.

        Employers are matched by case-insensitive company name.
        """
        sql = (
            "SELECT DISTINCT e.id AS employee_id, e.name, e.linkedin_url, other.company_name "
            "FROM employee_job_history mine "
            "JOIN employee_job_history other "
            "  ON other.company_name = mine.company_name COLLATE NOCASE "
            " AND other.employee_id != mine.employee_id "
            "JOIN employees e ON e.id = other.employee_id "
            "WHERE mine.employee_id = ? AND mine.company_name IS NOT NULL AND mine.company_name != '' "
            "ORDER BY e.id, other.company_name"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (employee_id,))
        return [dict(r) for r in cur.fetchall()]
