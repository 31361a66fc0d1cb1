"""Pack SVG images into resolution-specific PNG sprite sheets."""

from .atlas import Atlas, build_atlas, render_png
from .errors import (
    ConfigurationError,
    DuplicateNameError,
    PackingError,
    RenderError,
    SpriteError,
    SpriteIOError,
    SvgParseError,
)
from .fonts import FontRegistry, convert_text
from .manifest import ManifestEntry, build_manifest, manifest_to_json
from .packer import GuillotinePackerSheet, HeuristicType, PackResult, Rectangle, SplitHeuristic, pack
from .pipeline import (
    DEFAULT_RESOLUTIONS,
    Resolution,
    SpriteConfig,
    SpritePass,
    build_sprites,
    run_pipeline,
)
from .svg import AspectRatio, SourceImage, ViewBox, parse_svg
from .transform import Transform, TransformChain, compose, view_box_to_transform

__version__ = "0.1.0"
