"""Errors raised by the record access layer."""


class NotFoundError(LookupError):
    """An operation targeting a specific id found no matching row."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")
