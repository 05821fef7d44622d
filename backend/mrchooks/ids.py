import uuid


def new_id() -> str:
    """Opaque string identifier for new rows."""
    return uuid.uuid4().hex
