from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from models import CompanyRecord


_UPDATABLE = ("website", "domain", "linkedin_url")


class CompaniesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find_by_name(self, name: str) -> Optional[CompanyRecord]:
        """Case-insensitive lookup on the trimmed name."""
        cur = self.conn.cursor()
        cur.execute(
            "SELECT id, name, website, domain, linkedin_url FROM companies WHERE name = ? COLLATE NOCASE",
            ((name or "").strip(),),
        )
        row = cur.fetchone()
        return CompanyRecord.model_validate(dict(row)) if row else None

    def get(self, company_id: int) -> Optional[CompanyRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT id, name, website, domain, linkedin_url FROM companies WHERE id = ?", (company_id,))
        row = cur.fetchone()
        return CompanyRecord.model_validate(dict(row)) if row else None

    def insert(self, name: str, website: Optional[str], domain: Optional[str], linkedin_url: Optional[str]) -> int:
        """Insert a company row; raises sqlite3.IntegrityError if the name is taken."""
        cur = self.conn.cursor()
        cur.execute(
            "INSERT INTO companies (name, website, domain, linkedin_url) VALUES (?, ?, ?, ?)",
            (name, website, domain, linkedin_url),
        )
        return int(cur.lastrowid)

    def update_attributes(self, company_id: int, fields: Dict[str, Any]) -> None:
        columns = []
        values: List[Any] = []
        for key in _UPDATABLE:
            if key in fields:
                columns.append(f"{key} = ?")
                values.append(fields[key])
        if not columns:
            return
        values.append(company_id)
        self.conn.execute(f"UPDATE companies SET {', '.join(columns)} WHERE id = ?;", tuple(values))

