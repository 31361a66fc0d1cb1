from typing import NamedTuple, Optional, Tuple

from .packer import Rectangle
from .svg import SourceImage, ViewBox


def _fmt(value: float) -> str:
    """Format a number for an SVG transform attribute."""
    text = f"{value:.10g}"
    return "0" if text == "-0" else text


class Transform:
    """2D affine transform, in SVG matrix(a b c d e f) order.

    Maps (x, y) to (a*x + c*y + e, b*x + d*y + f).
    """

    def __init__(self, a: float = 1.0, b: float = 0.0, c: float = 0.0,
                 d: float = 1.0, e: float = 0.0, f: float = 0.0):
        self.a = a
        self.b = b
        self.c = c
        self.d = d
        self.e = e
        self.f = f

    @classmethod
    def translate(cls, tx: float, ty: float) -> 'Transform':
        return cls(e=tx, f=ty)

    @classmethod
    def scale(cls, sx: float, sy: Optional[float] = None) -> 'Transform':
        return cls(a=sx, d=sx if sy is None else sy)

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return self.a, self.b, self.c, self.d, self.e, self.f

    def __eq__(self, other):
        if not isinstance(other, Transform):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return "Transform(%s)" % ", ".join(_fmt(v) for v in self.as_tuple())

    def multiply(self, other: 'Transform') -> 'Transform':
        """Return self · other: other is applied first, then self."""
        return Transform(
            self.a * other.a + self.c * other.b,
            self.b * other.a + self.d * other.b,
            self.a * other.c + self.c * other.d,
            self.b * other.c + self.d * other.d,
            self.a * other.e + self.c * other.f + self.e,
            self.b * other.e + self.d * other.f + self.f,
        )

    def then(self, outer: 'Transform') -> 'Transform':
        """Apply self first, then outer."""
        return outer.multiply(self)

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f

    def is_identity(self) -> bool:
        return self.as_tuple() == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    def to_svg(self) -> str:
        """Render as the shortest equivalent SVG transform attribute value."""
        if self.b == 0 and self.c == 0:
            if self.a == 1 and self.d == 1:
                return f"translate({_fmt(self.e)} {_fmt(self.f)})"
            if self.e == 0 and self.f == 0:
                if self.a == self.d:
                    return f"scale({_fmt(self.a)})"
                return f"scale({_fmt(self.a)} {_fmt(self.d)})"
        return "matrix(%s)" % " ".join(_fmt(v) for v in self.as_tuple())


def _aligned_offset(align: str, x: float, y: float, free_w: float, free_h: float) -> Tuple[float, float]:
    """Shift (x, y) into the free space left by a uniform fit."""
    if align == "none":
        return x, y
    x_part, y_part = align[1:4], align[5:8]
    if x_part == "Mid":
        x += free_w / 2.0
    elif x_part == "Max":
        x += free_w
    if y_part == "Mid":
        y += free_h / 2.0
    elif y_part == "Max":
        y += free_h
    return x, y


def view_box_to_transform(view_box: ViewBox, width: float, height: float) -> Transform:
    """Map a view box onto a width×height viewport, honoring preserveAspectRatio."""
    sx = width / view_box.width
    sy = height / view_box.height

    aspect = view_box.aspect
    if aspect.align != "none":
        # slice covers the viewport, meet fits inside it
        s = max(sx, sy) if aspect.slice else min(sx, sy)
        sx = sy = s

    x = -view_box.x * sx
    y = -view_box.y * sy
    free_w = width - view_box.width * sx
    free_h = height - view_box.height * sy
    tx, ty = _aligned_offset(aspect.align, x, y, free_w, free_h)

    return Transform(sx, 0.0, 0.0, sy, tx, ty)


class TransformChain(NamedTuple):
    """Transforms from an image's local space to atlas pixels, innermost first."""
    view_box: Transform
    scale: Transform
    translate: Transform

    def combined(self) -> Transform:
        return self.view_box.then(self.scale).then(self.translate)


def compose(image: SourceImage, scale: float, placement: Rectangle) -> TransformChain:
    """Build the chain that renders image at scale× its size in its atlas slot."""
    return TransformChain(
        view_box=view_box_to_transform(image.view_box, image.width, image.height),
        scale=Transform.scale(scale),
        translate=Transform.translate(placement.x, placement.y),
    )
