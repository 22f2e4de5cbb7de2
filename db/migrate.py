# db/migrate.py

import os
import re
from glob import glob
from typing import List

from alembic import command
from alembic.config import Config as AlembicConfig
from dotenv import load_dotenv

from config import Config
from logger import setup_logger

# Load .env variables (useful in Docker or dev)
load_dotenv()

logger = setup_logger("db.migrate")

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

_CREATE_TABLE = re.compile(
    r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?([\w\.\"]+)\s*\(",
    re.IGNORECASE,
)
_TABLE_CONSTRAINT = re.compile(
    r"^(?:CONSTRAINT\s+[\w\"]+\s+)?(UNIQUE|PRIMARY\s+KEY)\s*\(([^)]*)\)",
    re.IGNORECASE,
)
_NON_COLUMN_ITEMS = ("CONSTRAINT", "UNIQUE", "PRIMARY", "FOREIGN", "CHECK", "EXCLUDE", "LIKE")


class MigrationError(RuntimeError):
    pass


def _strip_comments(sql: str) -> str:
    """Drop `--` and `/* */` comments; quoted strings and identifiers are kept intact."""
    out, idx, quote = [], 0, None
    while idx < len(sql):
        char = sql[idx]
        if quote:
            # A doubled quote closes and reopens, which keeps '' escapes intact
            if char == quote:
                quote = None
            out.append(char)
            idx += 1
        elif char in ("'", '"'):
            quote = char
            out.append(char)
            idx += 1
        elif sql.startswith("--", idx):
            end = sql.find("\n", idx)
            idx = len(sql) if end == -1 else end
        elif sql.startswith("/*", idx):
            end = sql.find("*/", idx + 2)
            idx = len(sql) if end == -1 else end + 2
            out.append(" ")
        else:
            out.append(char)
            idx += 1
    return "".join(out)


def _scan(text: str):
    """Yield (index, char, depth) for characters outside quotes."""
    depth, quote = 0, None
    for idx, char in enumerate(text):
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        yield idx, char, depth


def _table_body(sql: str, start: int) -> str:
    """Text between the parenthesis at `start` and its matching close."""
    for idx, char, depth in _scan(sql[start:]):
        if char == ")" and depth == 0:
            return sql[start + 1:start + idx]
    raise MigrationError("Unbalanced parentheses in CREATE TABLE statement")


def _split_items(body: str) -> List[str]:
    items, last = [], 0
    for idx, char, depth in _scan(body):
        if char == "," and depth == 0:
            items.append(body[last:idx].strip())
            last = idx + 1
    if body[last:].strip():
        items.append(body[last:].strip())
    return items


def find_dangling_constraints(sql: str) -> List[dict]:
    """
    Report table-level UNIQUE / PRIMARY KEY constraints that name a column
    the same CREATE TABLE statement never declares.
    """
    sql = _strip_comments(sql)
    problems = []

    for match in _CREATE_TABLE.finditer(sql):
        table = match.group(1).strip('"')
        items = _split_items(_table_body(sql, match.end() - 1))

        columns = set()
        for item in items:
            first_word = item.split()[0].upper() if item.split() else ""
            if first_word not in _NON_COLUMN_ITEMS:
                columns.add(item.split()[0].strip('"').lower())

        for item in items:
            constraint = _TABLE_CONSTRAINT.match(item)
            if not constraint:
                continue
            for column in constraint.group(2).split(","):
                column = column.strip().strip('"')
                if column and column.lower() not in columns:
                    problems.append({
                        "table": table,
                        "column": column,
                        "constraint": item,
                    })

    return problems


def check_migrations(directory: str = None) -> None:
    """Refuse to run migrations whose DDL references undeclared columns."""
    directory = directory or Config.MIGRATIONS_DIR
    errors = []

    for path in sorted(glob(os.path.join(directory, "*.up.sql"))):
        with open(path, "r", encoding="utf-8") as f:
            sql = f.read()

        for problem in find_dangling_constraints(sql):
            errors.append(
                f"{os.path.basename(path)}: constraint `{problem['constraint']}` on table "
                f"{problem['table']} references undeclared column `{problem['column']}`"
            )

    if errors:
        for error in errors:
            logger.error(error)
        raise MigrationError("; ".join(errors))


def run_migrations():
    check_migrations()

    alembic_cfg = AlembicConfig(os.path.join(ROOT_DIR, "alembic.ini"))
    alembic_cfg.set_main_option("script_location", os.path.join(ROOT_DIR, "alembic"))

    # Set DB URL explicitly from .env
    db_url = os.getenv("DATABASE_URL") or Config.DATABASE_URL
    if db_url:
        alembic_cfg.set_main_option("sqlalchemy.url", db_url)

    # Apply migrations
    logger.info("Applying migrations up to head")
    command.upgrade(alembic_cfg, "head")


if __name__ == "__main__":
    run_migrations()
