from __future__ import annotations

import sqlite3
from typing import Dict, List, Tuple


# Columns added after the first release; backfilled on older databases.
_EMPLOYEE_BACKFILL: Dict[str, str] = {
    "education": "TEXT",
    "job_history": "TEXT",
    "skills": "TEXT",
    "is_enriched": "INTEGER DEFAULT 0",
    "enrichment_outcome": "TEXT",
    "last_enriched_at": "TEXT",
}


def _existing_columns(cur: sqlite3.Cursor, table: str) -> set[str]:
    cur.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cur.fetchall()}


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create normalized schema, indexes, and views (idempotent)."""
    cur = conn.cursor()

    # Companies table; identity is the case-insensitive name
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS companies (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  name TEXT NOT NULL,\n"
            "  website TEXT,\n"
            "  domain TEXT,\n"
            "  linkedin_url TEXT\n"
            ")"
        )
    )
    cur.execute("CREATE UNIQUE INDEX IF NOT EXISTS ux_companies_name_nocase ON companies(name COLLATE NOCASE);")

    # Employees table
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS employees (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  name TEXT,\n"
            "  linkedin_url TEXT UNIQUE,\n"
            "  title TEXT,\n"
            "  company_id INTEGER,\n"
            "  current_company TEXT,\n"
            "  current_employer TEXT,\n"
            "  location TEXT,\n"
            "  city TEXT,\n"
            "  region TEXT,\n"
            "  country TEXT,\n"
            "  country_code TEXT,\n"
            "  region_latitude REAL,\n"
            "  region_longitude REAL,\n"
            "  phone_numbers TEXT,\n"
            "  emails TEXT,\n"
            "  personal_emails TEXT,\n"
            "  professional_emails TEXT,\n"
            "  birth_year INTEGER,\n"
            "  current_employer_website TEXT,\n"
            "  current_employer_domain TEXT,\n"
            "  current_employer_id INTEGER,\n"
            "  current_employer_linkedin_url TEXT,\n"
            "  profile_picture_url TEXT,\n"
            "  status TEXT,\n"
            "  suppressed INTEGER NOT NULL DEFAULT 0,\n"
            "  category TEXT,\n"
            "  education TEXT,\n"
            "  job_history TEXT,\n"
            "  skills TEXT,\n"
            "  is_enriched INTEGER DEFAULT 0,\n"
            "  enrichment_outcome TEXT,\n"
            "  last_enriched_at TEXT,\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    # Backfill columns if table existed before
    present = _existing_columns(cur, "employees")
    for column, ddl in _EMPLOYEE_BACKFILL.items():
        if column not in present:
            cur.execute(f"ALTER TABLE employees ADD COLUMN {column} {ddl};")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_employees_company_id ON employees(company_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_employees_is_enriched ON employees(is_enriched);")

    # Prior employment entries derived from enrichment data
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS employee_job_history (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  employee_id INTEGER NOT NULL,\n"
            "  company_id INTEGER,\n"
            "  company_name TEXT,\n"
            "  title TEXT,\n"
            "  start_date TEXT,\n"
            "  end_date TEXT,\n"
            "  is_current INTEGER NOT NULL DEFAULT 0,\n"
            "  position INTEGER NOT NULL,\n"
            "  FOREIGN KEY(employee_id) REFERENCES employees(id) ON DELETE CASCADE,\n"
            "  FOREIGN KEY(company_id) REFERENCES companies(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_job_history_employee ON employee_job_history(employee_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_job_history_company_name ON employee_job_history(company_name COLLATE NOCASE);")

    # View for joined reads
    cur.execute("DROP VIEW IF EXISTS v_employees_with_company;")
    cur.execute(
        (
            "CREATE VIEW v_employees_with_company AS\n"
            "SELECT\n"
            "  e.id AS employee_id,\n"
            "  e.name,\n"
            "  e.linkedin_url,\n"
            "  e.title,\n"
            "  e.location,\n"
            "  e.emails,\n"
            "  e.phone_numbers,\n"
            "  e.is_enriched,\n"
            "  e.enrichment_outcome,\n"
            "  e.last_enriched_at,\n"
            "  c.id AS company_id,\n"
            "  c.name AS company_name,\n"
            "  c.domain AS company_domain,\n"
            "  c.website AS company_website,\n"
            "  c.linkedin_url AS company_linkedin_url\n"
            "FROM employees e LEFT JOIN companies c ON e.company_id = c.id;"
        )
    )


def list_tables(conn: sqlite3.Connection) -> List[Tuple[str, int]]:
    """User tables with their row counts, by name."""
    cur = conn.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name")
    names = [r[0] for r in cur.fetchall()]
    return [(name, int(conn.execute(f'SELECT COUNT(*) FROM "{name}"').fetchone()[0])) for name in names]


def drop_table(conn: sqlite3.Connection, name: str) -> bool:
    """Drop a user table by exact name; returns False when no such table exists."""
    if name not in {t for t, _ in list_tables(conn)}:
        return False
    conn.execute(f'DROP TABLE IF EXISTS "{name}"')
    return True
