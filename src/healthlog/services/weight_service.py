from __future__ import annotations

import datetime as dt
import logging
import math

from src.healthlog.api.schemas.weights import WeightPayload
from src.healthlog.auth import Caller
from src.healthlog.db.repositories.users_repository import find_user_id_by_login, get_or_create_user_id
from src.healthlog.db.repositories.weights_repository import (
    DEFAULT_SORT,
    delete_weight,
    fetch_weights,
    fetch_weights_between,
    get_weight,
    insert_weight,
    replace_weight,
)
from src.healthlog.db.session import db_connection, db_transaction
from src.healthlog.errors import OwnerNotFound, WeightIdExists, WeightNotFound
from src.healthlog.search.weight_index import WeightSearchIndex, weight_search_index
from src.healthlog.timeutil import to_storage, utc_now

logger = logging.getLogger("healthlog.weights")


def page_meta(*, page: int, size: int, total: int) -> dict:
    total_pages = math.ceil(total / size) if size else 0
    return {
        "page": page,
        "size": size,
        "total": total,
        "total_pages": total_pages,
        "has_next": (page + 1) * size < total,
    }


class WeightService:
    """CRUD over weight measurements with a mirrored full-text index.

    Every mutation commits to the primary store first and is then copied into the
    index. The two writes are not atomic: if the index write fails the error
    propagates and the stores stay divergent until the record is written again.
    """

    def __init__(self, search_index: WeightSearchIndex) -> None:
        self._index = search_index

    def create(self, weight: WeightPayload, *, caller: Caller) -> dict:
        logger.debug("REST request to save Weight : %s", weight)
        if weight.id is not None:
            raise WeightIdExists()

        owner = weight.owner
        if not caller.is_admin:
            if owner is not None and owner != caller.login:
                logger.debug("Ignoring owner %s submitted by non-admin %s", owner, caller.login)
            logger.debug("No admin role, using current user: %s", caller.login)
            owner = caller.login

        with db_transaction() as connection:
            if caller.is_admin:
                user_id = self._resolve_owner(connection, owner)
            else:
                user_id = get_or_create_user_id(connection, login=owner)
            weight_id = insert_weight(
                connection,
                date_time=to_storage(weight.date_time),
                value=weight.value,
                user_id=user_id,
            )
            record = get_weight(connection, weight_id=weight_id)

        self._index.save(record)
        return record

    def update(self, weight: WeightPayload, *, caller: Caller) -> tuple[dict, bool]:
        """Replace a weight wholesale. Returns the record and whether it was created."""
        logger.debug("REST request to update Weight : %s", weight)
        if weight.id is None:
            return self.create(weight, caller=caller), True

        with db_transaction() as connection:
            user_id = self._resolve_owner(connection, weight.owner)
            updated = replace_weight(
                connection,
                weight_id=weight.id,
                date_time=to_storage(weight.date_time),
                value=weight.value,
                user_id=user_id,
            )
            if not updated:
                raise WeightNotFound(weight.id)
            record = get_weight(connection, weight_id=weight.id)

        self._index.save(record)
        return record, False

    def list_page(self, *, caller: Caller, page: int, size: int, sort: str = DEFAULT_SORT) -> dict:
        logger.debug("REST request to get a page of Weights")
        # Admins see every record, everyone else only their own.
        owner = None if caller.is_admin else caller.login
        with db_connection() as connection:
            items, total = fetch_weights(connection, owner=owner, limit=size, offset=page * size, sort=sort)
        return {"items": items, "page": page_meta(page=page, size=size, total=total)}

    def get(self, weight_id: int) -> dict:
        logger.debug("REST request to get Weight : %s", weight_id)
        with db_connection() as connection:
            record = get_weight(connection, weight_id=weight_id)
        if record is None:
            raise WeightNotFound(weight_id)
        return record

    def delete(self, weight_id: int) -> None:
        logger.debug("REST request to delete Weight : %s", weight_id)
        with db_transaction() as connection:
            delete_weight(connection, weight_id=weight_id)
        self._index.delete(weight_id)

    def search(self, query: str, *, page: int, size: int) -> dict:
        logger.debug("REST request to search for a page of Weights for query %s", query)
        items, total = self._index.search(query, limit=size, offset=page * size)
        return {"items": items, "page": page_meta(page=page, size=size, total=total)}

    def readings_in_last_days(self, days: int, *, caller: Caller, now: dt.datetime | None = None) -> dict:
        right_now = now or utc_now()
        days_ago = right_now - dt.timedelta(days=days)
        with db_connection() as connection:
            readings = fetch_weights_between(
                connection,
                owner=caller.login,
                start=to_storage(days_ago),
                end=to_storage(right_now),
            )
        return {"label": f"Last {days} Days", "readings": readings}

    @staticmethod
    def _resolve_owner(connection, login: str | None) -> int | None:
        if login is None:
            return None
        user_id = find_user_id_by_login(connection, login=login)
        if user_id is None:
            raise OwnerNotFound(login)
        return user_id


weight_service = WeightService(weight_search_index)
