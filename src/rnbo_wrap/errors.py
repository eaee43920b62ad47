"""
Custom exceptions for rnbo_wrap.
"""


class RnboWrapError(Exception):
    """Base exception for rnbo_wrap errors."""

    pass


class NotFoundError(RnboWrapError):
    """A descriptor, template or export directory does not exist."""

    pass


class ParseError(RnboWrapError):
    """Error parsing description.json."""

    pass


class DescriptorError(RnboWrapError):
    """A descriptor field could not be read."""

    def __init__(self, message: str, field_name: str):
        super().__init__(message)
        self.field_name = field_name


class MissingFieldError(DescriptorError):
    """A required descriptor field is absent."""

    pass


class TypeMismatchError(DescriptorError):
    """A descriptor field holds the wrong kind of value."""

    pass


class SymbolNotFoundError(RnboWrapError):
    """No factory symbol could be recovered from an export's sources."""

    pass


class NullMemberReferenceError(RnboWrapError):
    """An export declares no audio channels, so there is no frames member."""

    pass


class TemplateError(RnboWrapError):
    """Error loading or rendering an operator template."""

    pass


class ValidationError(RnboWrapError):
    """Error validating configuration or inputs."""

    pass
