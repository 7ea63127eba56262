def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource. Anonymous actors own nothing."""
    if actor_id is None or owner_id is None:
        return False
    return str(actor_id) == str(owner_id)
