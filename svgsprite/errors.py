from typing import List, Optional, Tuple


class SpriteError(Exception):
    """Base class for every failure that aborts a sprite build."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.pass_label: Optional[str] = None

    def for_pass(self, label: str) -> 'SpriteError':
        """Tag the error with the resolution pass it came from."""
        self.pass_label = label
        return self

    def __str__(self):
        if self.pass_label:
            return f"[{self.pass_label} pass] {self.message}"
        return self.message


class ConfigurationError(SpriteError):
    """Raised when the build is misconfigured before any work starts."""


class DuplicateNameError(SpriteError):
    """Raised when two SVG files resolve to the same sprite name."""

    def __init__(self, name: str, path: Optional[str] = None):
        message = f"sprite with name `{name}` already exists"
        if path:
            message += f" (while importing {path})"
        super().__init__(message)
        self.name = name
        self.path = path


class SpriteIOError(SpriteError):
    """Raised when a directory or file cannot be read or written."""

    def __init__(self, message: str, path: str):
        super().__init__(f"{message}: {path}")
        self.path = path


class SvgParseError(SpriteError):
    """Raised when an .svg file is not a usable SVG document."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class PackingError(SpriteError):
    """Raised when not every sprite fits into the canvas bound."""

    def __init__(self, rejected: List[Tuple[str, int, int]], width: int, height: int):
        listed = ", ".join(f"{name} ({w}×{h})" for name, w, h in rejected)
        super().__init__(
            f"not all sprites fit into the provided width and height "
            f"({width}×{height}); rejected: {listed}"
        )
        self.rejected = rejected
        self.width = width
        self.height = height


class RenderError(SpriteError):
    """Raised when the rasterizer cannot produce the atlas image."""
