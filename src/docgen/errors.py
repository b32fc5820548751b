from __future__ import annotations


class DocgenError(Exception):
    pass


class TemplateError(DocgenError):
    pass


class FieldInputError(DocgenError):
    pass


class StyleApplicationError(DocgenError):
    def __init__(self, message: str, *, start: int, end: int, length: int) -> None:
        super().__init__(message)
        self.start = start
        self.end = end
        self.length = length
