"""
Errors raised by the mapping registry and the generic DAO.

Both are ``ValueError`` subclasses: they signal a bad mapping definition or a
bad call, and are expected to surface at configuration time.
"""


class InvalidArgumentError(ValueError):
    """A required argument was empty, or referenced a property, column or
    persistent class that is not known yet."""


class InconsistentMappingError(InvalidArgumentError):
    """A property/column pair would overwrite an existing mapping.

    The attempted change has already been reverted when this is raised.
    """

    def __init__(self, property_name: str, column: str):
        self.property_name = property_name
        self.column = column
        super().__init__(
            f"Invalid state of mapping: property ({property_name}) and column ({column}) "
            "would overwrite an existing mapping and leave an uneven set of properties to columns"
        )
