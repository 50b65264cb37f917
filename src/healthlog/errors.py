from __future__ import annotations


class WeightServiceError(Exception):
    status_code = 400
    error_key = "error"
    message = "Weight request failed."
    entity = "weight"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class WeightIdExists(WeightServiceError):
    error_key = "idexists"
    message = "A new weight cannot already have an ID"


class OwnerNotFound(WeightServiceError):
    error_key = "ownernotfound"

    def __init__(self, login: str) -> None:
        super().__init__(f"No user with login {login!r}")
        self.login = login


class InvalidSearchQuery(WeightServiceError):
    error_key = "invalidquery"

    def __init__(self, query: str) -> None:
        super().__init__(f"Search query could not be parsed: {query!r}")
        self.query = query


class WeightNotFound(WeightServiceError):
    status_code = 404
    error_key = "notfound"

    def __init__(self, weight_id: int) -> None:
        super().__init__(f"Weight {weight_id} not found")
        self.weight_id = weight_id
