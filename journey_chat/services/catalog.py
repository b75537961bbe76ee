from typing import Any, Optional

from journey_chat.db.crud_helper import journey_crud
from journey_chat.models.catalog import Journey


def list_journeys() -> list[dict[str, Any]]:
    return journey_crud.list_resource(
        where=[Journey.is_active.is_(True)],
        order_by=["order", "id"],
    )


def get_journey(journey_key: str) -> Optional[dict[str, Any]]:
    return journey_crud.get_resource(
        resource_id=None,
        where=[Journey.key == journey_key, Journey.is_active.is_(True)],
    )
