"""
sifbuild-specific exception types for better error handling
"""


class SifBuildError(Exception):
    """Base exception for all sifbuild errors"""
    pass


class RequestError(SifBuildError):
    """Invalid or inconsistent build options"""
    pass


class ConflictingSourcesError(RequestError):
    """More than one build source was given"""
    pass


class MissingSourceError(RequestError):
    """No build source was given"""
    pass


class InvalidContainerKindError(RequestError):
    """Container type is neither sandbox nor sif"""
    pass


class InvalidVersionError(RequestError):
    """Version is missing or not dotted-numeric"""
    pass


class InvalidToolNameError(RequestError):
    """Tool name is missing or empty after suffix stripping"""
    pass


class ConfigurationError(SifBuildError):
    """Request is not allowed by the administrative configuration"""
    pass


class KindDisabledError(ConfigurationError):
    """Requested container kind has been disabled"""
    def __init__(self, message: str, kind: str = None):
        super().__init__(message)
        self.kind = kind


class SourceNotFoundError(SifBuildError):
    """Recipe file or build context file is missing"""
    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class OutputExistsError(SifBuildError):
    """Something already exists at the output path"""
    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class DependencyError(SifBuildError):
    """A required external tool is unavailable"""
    def __init__(self, message: str, program: str = None):
        super().__init__(message)
        self.program = program


class ImageNotFoundError(SifBuildError):
    """Referenced image is not present in local storage"""
    pass


class CommandFailedError(SifBuildError):
    """An external build command returned a non-zero status"""
    def __init__(self, message: str, returncode: int = None):
        super().__init__(message)
        self.returncode = returncode
