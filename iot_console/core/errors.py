"""Exceptions raised by the console core."""


class ConsoleError(Exception):
    """Base class for console errors."""


class SchemaIntegrityError(ConsoleError):
    """A message schema in the catalog is malformed. Raised at registry load."""


class UnknownSchemaError(ConsoleError):
    def __init__(self, schema_id: str):
        super().__init__(f"Unknown message type: {schema_id}")
        self.schema_id = schema_id


class NoSchemaSelectedError(ConsoleError):
    def __init__(self):
        super().__init__("No message type selected")
