"""
SVG loading for the sprite builder.

Parses an SVG document into an ElementTree, resolves its intrinsic size and
view box, and wraps the result into a SourceImage ready for packing.
"""

import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Optional

from .css import inline_stylesheets
from .errors import SvgParseError

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Used when a document declares neither a size nor a view box, and as the
# reference for percentage sizes without a view box
DEFAULT_SIZE = 100.0

# CSS absolute units in user units (px) at 96 dpi
UNITS = {
    "": 1.0,
    "px": 1.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
}

ALIGNMENTS = {
    "none",
    "xMinYMin", "xMidYMin", "xMaxYMin",
    "xMinYMid", "xMidYMid", "xMaxYMid",
    "xMinYMax", "xMidYMax", "xMaxYMax",
}

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z%]*)\s*$")
_URL_RE = re.compile(r"url\(\s*['\"]?#([^)'\"\s]+)['\"]?\s*\)")
_XLINK_HREF = f"{{{XLINK_NS}}}href"


def svg_tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


def local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


@dataclass(frozen=True)
class AspectRatio:
    """A preserveAspectRatio value: alignment plus meet (default) or slice."""
    align: str = "xMidYMid"
    slice: bool = False

    @classmethod
    def parse(cls, value: Optional[str]) -> 'AspectRatio':
        if not value:
            return cls()
        parts = value.split()
        if parts and parts[0] == "defer":
            parts = parts[1:]
        if not parts or parts[0] not in ALIGNMENTS:
            raise SvgParseError(f"invalid preserveAspectRatio `{value}`")
        align = parts[0]
        slice_ = False
        if len(parts) > 1:
            if parts[1] not in ("meet", "slice") or len(parts) > 2:
                raise SvgParseError(f"invalid preserveAspectRatio `{value}`")
            slice_ = parts[1] == "slice"
        return cls(align, slice_)


@dataclass(frozen=True)
class ViewBox:
    """A rectangle in the image's local space and how it fits the viewport."""
    x: float
    y: float
    width: float
    height: float
    aspect: AspectRatio = field(default_factory=AspectRatio)


class SourceImage:
    """A named SVG image waiting to be placed on the atlas.

    The parsed content tree belongs to this image until take_content() hands
    it over to the atlas; it can be taken exactly once.
    """

    def __init__(self, name: str, width: float, height: float, view_box: ViewBox,
                 content: ET.Element, path: Optional[str] = None):
        self.name = name
        self.width = width
        self.height = height
        self.view_box = view_box
        self.path = path
        self._content = content

    def __repr__(self):
        return f"SourceImage({self.name!r}, {self.width}×{self.height})"

    @property
    def has_content(self) -> bool:
        return self._content is not None

    @property
    def content(self) -> ET.Element:
        if self._content is None:
            raise RuntimeError(f"content of `{self.name}` was already moved into an atlas")
        return self._content

    def take_content(self) -> ET.Element:
        content = self.content
        self._content = None
        return content

    def pixel_size(self, scale: float):
        """Size of this image on the packing canvas at the given scale."""
        return math.floor(scale * self.width), math.floor(scale * self.height)


def parse_length(value: str, reference: Optional[float] = None) -> float:
    """Convert an SVG length such as `12`, `1.5in` or `50%` to user units."""
    match = _LENGTH_RE.match(value)
    if not match:
        raise SvgParseError(f"invalid length `{value}`")
    number = float(match.group(1))
    unit = match.group(2)
    if unit == "%":
        if reference is None:
            raise SvgParseError(f"percentage length `{value}` without a reference size")
        return number * reference / 100.0
    if unit not in UNITS:
        raise SvgParseError(f"unsupported unit in length `{value}`")
    return number * UNITS[unit]


def parse_view_box(value: str) -> tuple:
    parts = value.replace(",", " ").split()
    try:
        numbers = tuple(float(p) for p in parts)
    except ValueError:
        raise SvgParseError(f"invalid viewBox `{value}`") from None
    if len(numbers) != 4:
        raise SvgParseError(f"invalid viewBox `{value}`")
    if numbers[2] <= 0 or numbers[3] <= 0:
        raise SvgParseError(f"viewBox `{value}` has a non-positive size")
    return numbers


def _qualify(root: ET.Element):
    """Put un-namespaced elements into the SVG namespace."""
    for element in root.iter():
        if isinstance(element.tag, str) and not element.tag.startswith("{"):
            element.tag = svg_tag(element.tag)


def parse_svg(data: bytes, name: str, path: Optional[str] = None) -> SourceImage:
    """Parse raw SVG bytes into a SourceImage."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise SvgParseError(f"malformed SVG ({e})", path) from e

    if local_name(root.tag) != "svg":
        raise SvgParseError(f"root element is <{local_name(root.tag)}>, expected <svg>", path)
    if root.tag == "svg":
        _qualify(root)

    try:
        box = None
        if root.get("viewBox"):
            box = parse_view_box(root.get("viewBox"))
        aspect = AspectRatio.parse(root.get("preserveAspectRatio"))

        if root.get("width"):
            width = parse_length(root.get("width"), box[2] if box else DEFAULT_SIZE)
        else:
            width = box[2] if box else DEFAULT_SIZE
        if root.get("height"):
            height = parse_length(root.get("height"), box[3] if box else DEFAULT_SIZE)
        else:
            height = box[3] if box else DEFAULT_SIZE
    except SvgParseError as e:
        raise SvgParseError(e.message, path) from e

    if width <= 0 or height <= 0:
        raise SvgParseError(f"image size {width}×{height} is not positive", path)

    inline_stylesheets(root, svg_tag("style"))

    if box is None:
        box = (0.0, 0.0, width, height)

    return SourceImage(name, width, height, ViewBox(*box, aspect=aspect), root, path)


def namespace_ids(root: ET.Element, prefix: str) -> Dict[str, str]:
    """Prefix every id under root and rewrite references to them.

    Covers url(#id) in attributes, style attributes and <style> text, and
    href / xlink:href. Returns the old-to-new id mapping.
    """
    renamed = {}
    for element in root.iter():
        old = element.get("id")
        if old:
            renamed[old] = prefix + old
            element.set("id", prefix + old)
    if not renamed:
        return renamed

    def replace_url(match):
        target = match.group(1)
        if target in renamed:
            return f"url(#{renamed[target]})"
        return match.group(0)

    for element in root.iter():
        for key, value in list(element.attrib.items()):
            if key in ("href", _XLINK_HREF):
                if value.startswith("#") and value[1:] in renamed:
                    element.set(key, "#" + renamed[value[1:]])
            elif "url(" in value:
                element.set(key, _URL_RE.sub(replace_url, value))
        if element.tag == svg_tag("style") and element.text and "url(" in element.text:
            element.text = _URL_RE.sub(replace_url, element.text)
    return renamed
