"""
Atlas assembly: every placed sprite is wrapped in its transform chain and
attached to a single SVG document the size of the packed canvas.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, Iterable, Tuple

from PIL import Image

from .errors import DuplicateNameError, RenderError
from .packer import Rectangle
from .svg import SourceImage, namespace_ids, svg_tag
from .transform import TransformChain

# Attributes of a source <svg> root that describe its viewport, not its content
VIEWPORT_ATTRIBUTES = {
    'width', 'height', 'x', 'y', 'viewBox', 'preserveAspectRatio',
    'version', 'baseProfile', 'transform', 'zoomAndPan',
}


@dataclass
class Atlas:
    """The composite scene for one resolution pass."""
    width: int
    height: int
    scale: float
    root: ET.Element
    placements: Dict[str, Rectangle] = field(default_factory=dict)

    def to_svg(self) -> bytes:
        return ET.tostring(self.root, encoding='utf-8', xml_declaration=True)


def _wrap(image: SourceImage, placement: Rectangle, chain: TransformChain,
          prefix: str, defs: ET.Element) -> ET.Element:
    """Build translate ⊃ scale ⊃ view box groups around the image's content."""
    content = image.take_content()
    namespace_ids(content, prefix)

    clip_id = f'{prefix}slot'
    clip = ET.SubElement(defs, svg_tag('clipPath'), {'id': clip_id})
    ET.SubElement(clip, svg_tag('rect'), {
        'x': '0', 'y': '0',
        'width': str(placement.width), 'height': str(placement.height),
    })

    position = ET.Element(svg_tag('g'), {
        'transform': chain.translate.to_svg(),
        'clip-path': f'url(#{clip_id})',
    })
    scaled = ET.SubElement(position, svg_tag('g'), {'transform': chain.scale.to_svg()})

    # Keep inheritable styling declared on the source root
    attributes = {k: v for k, v in content.attrib.items() if k not in VIEWPORT_ATTRIBUTES}
    attributes['transform'] = chain.view_box.to_svg()
    viewbox = ET.SubElement(scaled, svg_tag('g'), attributes)
    viewbox.extend(list(content))

    return position


def build_atlas(width: int, height: int, scale: float,
                entries: Iterable[Tuple[SourceImage, Rectangle, TransformChain]]) -> Atlas:
    """Assemble a width×height scene from (image, placement, chain) entries.

    Each image's content is moved out of the image; building two atlases from
    the same SourceImage fails.
    """
    root = ET.Element(svg_tag('svg'), {
        'width': str(width),
        'height': str(height),
        'viewBox': f'0 0 {width} {height}',
    })
    defs = ET.SubElement(root, svg_tag('defs'))

    placements = {}
    for index, (image, placement, chain) in enumerate(entries):
        if image.name in placements:
            raise DuplicateNameError(image.name, image.path)
        root.append(_wrap(image, placement, chain, f'sprite{index}-', defs))
        placements[image.name] = placement

    return Atlas(width, height, scale, root, placements)


def render_png(atlas: Atlas) -> Image.Image:
    """Rasterize the atlas to an RGBA image exactly the atlas size."""
    if atlas.width <= 0 or atlas.height <= 0:
        raise RenderError(f"cannot render an empty {atlas.width}×{atlas.height} atlas")

    # cairocffi loads the native cairo library on import
    try:
        import cairosvg
    except (ImportError, OSError) as e:
        raise RenderError(f"rasterizer unavailable: {e}") from e

    try:
        png_data = cairosvg.svg2png(
            bytestring=atlas.to_svg(),
            output_width=atlas.width,
            output_height=atlas.height,
        )
        image = Image.open(BytesIO(png_data))
        image.load()
    except Exception as e:
        raise RenderError(f"renderer failed: {e}") from e

    if image.size != (atlas.width, atlas.height):
        raise RenderError(
            f"renderer produced {image.width}×{image.height}, "
            f"expected {atlas.width}×{atlas.height}"
        )
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    return image
