from jinja2 import TemplateError


class DockerMetaError(Exception):
    """Base class for all docker-meta exceptions"""

    pass


class ConfigError(DockerMetaError):
    """Generic error for invalid inputs, rule definitions, and settings"""

    def __init__(self, message: str = None, value: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.value = value

        if value is not None:
            self.add_note(f"Offending value: {value!r}")


class EvaluationError(DockerMetaError):
    """Generic error for expressions that cannot be evaluated"""

    def __init__(self, message: str = None, pattern: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.pattern = pattern
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        s = "Error evaluating expression"
        if self.pattern is not None:
            s += f" '{self.pattern}'"
        if isinstance(self.__cause__, TemplateError) and getattr(self.__cause__, "lineno", None):
            s += f", line {self.__cause__.lineno}"
        s += f": {self.message}"
        return s


class GitContextError(DockerMetaError):
    """Error for a git snapshot that could not be collected"""

    def __init__(self, message: str = None, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        s = f"{self.message}"
        if self.path:
            s += f"\n  - Repository path: {self.path}"
        return s
