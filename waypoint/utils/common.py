from waypoint.database.store import DocumentStore
from waypoint.utils.exceptions import NotFoundError

def get_object_or_404(store: DocumentStore, model, object_id, message: str):
    """
    Fetches a document by id or raises NotFoundError with the given message.
    """
    obj = store.find_one(model, model.id == object_id)
    if not obj:
        raise NotFoundError(message, metadata={"model": model.__name__, "id": object_id})
    return obj
