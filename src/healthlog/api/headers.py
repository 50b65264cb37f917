from __future__ import annotations

from urllib.parse import urlencode

APP_NAME = "healthlogApp"
ALERT_HEADER = "X-Healthlog-Alert"
ERROR_HEADER = "X-Healthlog-Error"
PARAMS_HEADER = "X-Healthlog-Params"
TOTAL_COUNT_HEADER = "X-Total-Count"


def alert(message: str, param: str) -> dict[str, str]:
    return {ALERT_HEADER: message, PARAMS_HEADER: param}


def entity_creation_alert(entity: str, param: str) -> dict[str, str]:
    return alert(f"{APP_NAME}.{entity}.created", param)


def entity_update_alert(entity: str, param: str) -> dict[str, str]:
    return alert(f"{APP_NAME}.{entity}.updated", param)


def entity_deletion_alert(entity: str, param: str) -> dict[str, str]:
    return alert(f"{APP_NAME}.{entity}.deleted", param)


def failure_alert(entity: str, error_key: str) -> dict[str, str]:
    return {ERROR_HEADER: f"error.{error_key}", PARAMS_HEADER: entity}


def pagination_headers(base_url: str, page_meta: dict, *, query: str | None = None) -> dict[str, str]:
    """Build ``X-Total-Count`` and an RFC 5988 ``Link`` header for a page."""
    page = page_meta["page"]
    size = page_meta["size"]
    last_page = max(page_meta["total_pages"] - 1, 0)

    def link(target: int, rel: str) -> str:
        params: dict[str, object] = {"page": target, "size": size}
        if query is not None:
            params = {"query": query, **params}
        return f'<{base_url}?{urlencode(params)}>; rel="{rel}"'

    links = []
    if page < last_page:
        links.append(link(page + 1, "next"))
    if page > 0:
        links.append(link(page - 1, "prev"))
    links.append(link(last_page, "last"))
    links.append(link(0, "first"))
    return {TOTAL_COUNT_HEADER: str(page_meta["total"]), "Link": ",".join(links)}
