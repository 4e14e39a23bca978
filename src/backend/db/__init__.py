"""Database module."""

from db.cosmos_session import RESPONSES_CONTAINER, USERS_CONTAINER, CosmosSession

__all__ = ["CosmosSession", "USERS_CONTAINER", "RESPONSES_CONTAINER"]
