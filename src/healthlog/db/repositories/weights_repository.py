from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection

SORT_SQL = {
    "date_time_desc": "w.date_time DESC, w.id DESC",
    "date_time_asc": "w.date_time ASC, w.id ASC",
    "value_desc": "w.value DESC, w.date_time DESC, w.id DESC",
    "value_asc": "w.value ASC, w.date_time DESC, w.id DESC",
    "id_desc": "w.id DESC",
    "id_asc": "w.id ASC",
}
DEFAULT_SORT = "date_time_desc"

_SELECT_SQL = """
  SELECT w.id, w.date_time, w.value, u.login AS owner
  FROM weights w
  LEFT JOIN users u ON u.id = w.user_id
"""


def _to_record(row) -> dict:
    return {
        "id": int(row["id"]),
        "date_time": row["date_time"],
        "value": float(row["value"]),
        "owner": row["owner"],
    }


def insert_weight(connection: Connection, *, date_time: str, value: float, user_id: int | None) -> int:
    result = connection.execute(
        text("INSERT INTO weights (date_time, value, user_id) VALUES (:date_time, :value, :user_id)"),
        {"date_time": date_time, "value": value, "user_id": user_id},
    )
    return int(result.lastrowid)


def replace_weight(
    connection: Connection,
    *,
    weight_id: int,
    date_time: str,
    value: float,
    user_id: int | None,
) -> bool:
    result = connection.execute(
        text(
            """
            UPDATE weights
            SET date_time=:date_time, value=:value, user_id=:user_id
            WHERE id=:weight_id
            """
        ),
        {"weight_id": weight_id, "date_time": date_time, "value": value, "user_id": user_id},
    )
    return result.rowcount > 0


def delete_weight(connection: Connection, *, weight_id: int) -> None:
    connection.execute(text("DELETE FROM weights WHERE id=:weight_id"), {"weight_id": weight_id})


def get_weight(connection: Connection, *, weight_id: int) -> dict | None:
    row = connection.execute(
        text(f"{_SELECT_SQL} WHERE w.id = :weight_id"),
        {"weight_id": weight_id},
    ).mappings().first()
    if not row:
        return None
    return _to_record(row)


def fetch_weights(
    connection: Connection,
    *,
    owner: str | None,
    limit: int,
    offset: int,
    sort: str,
) -> tuple[list[dict], int]:
    """Return one page of weights and the total row count.

    ``owner=None`` lists every record; otherwise only the records owned by that login.
    """
    sort_sql = SORT_SQL.get((sort or "").strip().lower(), SORT_SQL[DEFAULT_SORT])
    where_sql = ""
    params: dict[str, object] = {"limit": limit, "offset": offset}
    if owner is not None:
        where_sql = " WHERE u.login = :owner"
        params["owner"] = owner

    total_row = connection.execute(
        text(f"SELECT COUNT(*) AS total FROM weights w LEFT JOIN users u ON u.id = w.user_id {where_sql}"),
        params,
    ).mappings().first()
    total = int(total_row["total"] if total_row else 0)

    rows = connection.execute(
        text(f"{_SELECT_SQL} {where_sql} ORDER BY {sort_sql} LIMIT :limit OFFSET :offset"),
        params,
    ).mappings().all()
    return [_to_record(row) for row in rows], total


def fetch_weights_between(connection: Connection, *, owner: str, start: str, end: str) -> list[dict]:
    rows = connection.execute(
        text(
            f"""
            {_SELECT_SQL}
            WHERE u.login = :owner AND w.date_time BETWEEN :start AND :end
            ORDER BY w.date_time DESC, w.id DESC
            """
        ),
        {"owner": owner, "start": start, "end": end},
    ).mappings().all()
    return [_to_record(row) for row in rows]
