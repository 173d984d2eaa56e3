"""Exception types shared by the store and the newsquest components."""


class NewsquestError(Exception):
    """Base class for all newsquest errors."""


class NotFoundError(NewsquestError):
    """A user, article, achievement or notification does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class StoreUnavailableError(NewsquestError):
    """The document store could not complete a read or write."""


class InvalidInputError(NewsquestError):
    """Caller-supplied input was rejected before touching the store."""
