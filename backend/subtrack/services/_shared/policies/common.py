from uuid import UUID


def is_owner(*, actor_id: UUID | str, owner_id: UUID | str) -> bool:
    """Return True if the actor owns the resource (ids compared as UUIDs)."""
    try:
        return UUID(str(actor_id)) == UUID(str(owner_id))
    except ValueError:
        return False
