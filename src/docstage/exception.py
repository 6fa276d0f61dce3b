class DocstageError(Exception):
    """Base exception for all docstage errors"""

    pass


class ValidationError(DocstageError):
    """Raised when an operation is not allowed in the current state"""

    pass


class NotImplementedYet(DocstageError, NotImplementedError):
    def __init__(self, name: str):
        super().__init__(f"{name} is not implemented yet")
        self.name = name


class DocumentNotFoundError(DocstageError):
    """Raised when a modification targets a document that does not exist"""

    pass

