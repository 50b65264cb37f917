"""Full-text index of weight records.

The index lives in its own SQLite database as an FTS5 table. It is a mirror of the
primary store, written after each committed mutation; it is never read back to
answer anything but free-text searches.
"""

from __future__ import annotations

import json
import logging
import re

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from src.healthlog.db.session import search_connection, search_transaction
from src.healthlog.errors import InvalidSearchQuery

logger = logging.getLogger("healthlog.search")

# Messages SQLite raises for MATCH expressions it cannot parse.
_QUERY_ERROR_MARKERS = ("fts5", "syntax error", "no such column", "unterminated string")

_OPERATORS = {"AND", "OR", "NOT", "NEAR"}
_QUERY_TOKEN = re.compile(r'(?:[A-Za-z_]\w*:)?"[^"]*"?|[()]|[^\s()"]+')
_BAREWORD = re.compile(r"\w+\*?")
_COLUMN_FILTER = re.compile(r"([A-Za-z_]\w*):(.+)")


def _quote_term(term: str) -> str:
    if _BAREWORD.fullmatch(term):
        return term
    prefix = term.endswith("*")
    body = term[:-1] if prefix else term
    quoted = '"' + body.replace('"', '""') + '"'
    return quoted + "*" if prefix else quoted


def to_match_expression(query: str) -> str:
    """Rewrite free text into an FTS5 MATCH expression.

    Barewords holding punctuation such as `80.0` or `2026-10-18` become quoted
    phrases; operators, parentheses, `column:term` filters and `term*` prefixes are
    kept. Phrases already in quotes pass through untouched.
    """
    parts = []
    for token in _QUERY_TOKEN.findall(query):
        if '"' in token or token in ("(", ")") or token in _OPERATORS:
            parts.append(token)
            continue
        column = _COLUMN_FILTER.fullmatch(token)
        if column:
            parts.append(f"{column.group(1)}:{_quote_term(column.group(2))}")
        else:
            parts.append(_quote_term(token))
    return " ".join(parts)


def _searchable_time(value: str) -> str:
    # "2026-10-18T12:00:00.000000Z" would tokenize as "18t12"; split date from time.
    return value.replace("T", " ").rstrip("Z")


class WeightSearchIndex:
    table = "weight_index"

    def ensure_index(self) -> None:
        with search_transaction() as connection:
            connection.execute(
                text(
                    f"""
                    CREATE VIRTUAL TABLE IF NOT EXISTS {self.table} USING fts5(
                      weight_id UNINDEXED,
                      owner,
                      date_time,
                      value,
                      document UNINDEXED
                    )
                    """
                )
            )

    def save(self, record: dict) -> None:
        with search_transaction() as connection:
            connection.execute(text(f"DELETE FROM {self.table} WHERE weight_id = :weight_id"), {"weight_id": record["id"]})
            connection.execute(
                text(
                    f"""
                    INSERT INTO {self.table} (weight_id, owner, date_time, value, document)
                    VALUES (:weight_id, :owner, :date_time, :value, :document)
                    """
                ),
                {
                    "weight_id": record["id"],
                    "owner": record.get("owner") or "",
                    "date_time": _searchable_time(record["date_time"]),
                    "value": repr(float(record["value"])),
                    "document": json.dumps(record),
                },
            )
        logger.debug("Indexed weight %s", record["id"])

    def delete(self, weight_id: int) -> None:
        with search_transaction() as connection:
            connection.execute(text(f"DELETE FROM {self.table} WHERE weight_id = :weight_id"), {"weight_id": weight_id})
        logger.debug("Removed weight %s from index", weight_id)

    def search(self, query: str, *, limit: int, offset: int) -> tuple[list[dict], int]:
        params = {"query": to_match_expression(query), "limit": limit, "offset": offset}
        try:
            with search_connection() as connection:
                total_row = connection.execute(
                    text(f"SELECT COUNT(*) AS total FROM {self.table} WHERE {self.table} MATCH :query"),
                    params,
                ).mappings().first()
                rows = connection.execute(
                    text(
                        f"""
                        SELECT document
                        FROM {self.table}
                        WHERE {self.table} MATCH :query
                        ORDER BY rank, weight_id DESC
                        LIMIT :limit OFFSET :offset
                        """
                    ),
                    params,
                ).mappings().all()
        except OperationalError as error:
            message = str(error.orig).lower()
            if any(marker in message for marker in _QUERY_ERROR_MARKERS):
                raise InvalidSearchQuery(query) from error
            raise

        total = int(total_row["total"] if total_row else 0)
        return [json.loads(row["document"]) for row in rows], total

    def count(self) -> int:
        with search_connection() as connection:
            row = connection.execute(text(f"SELECT COUNT(*) AS total FROM {self.table}")).mappings().first()
        return int(row["total"] if row else 0)


weight_search_index = WeightSearchIndex()
