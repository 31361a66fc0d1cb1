"""
Sprite build pipeline.

Each resolution is an independent pass: it ingests the SVG directories into
its own set of SourceImages, packs them, assembles and renders the atlas and
derives the manifest. Nothing is written until every pass has succeeded.
"""

import math
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from PIL import Image

from .atlas import Atlas, build_atlas, render_png
from .errors import ConfigurationError, DuplicateNameError, SpriteError, SpriteIOError
from .fonts import FontRegistry, convert_text
from .manifest import ManifestEntry, build_manifest, manifest_to_json
from .packer import HeuristicType, PackResult, SplitHeuristic, pack
from .svg import SourceImage, parse_svg
from .transform import compose

SVG_EXTENSION = '.svg'


@dataclass(frozen=True)
class Resolution:
    """Scale factor of one pass and the suffix of its output files."""
    scale: float
    suffix: str

    @property
    def label(self) -> str:
        return f"{self.scale:g}x"

    def describe(self, noun: str) -> str:
        return noun if self.scale == 1 else f"{self.label} {noun}"


DEFAULT_RESOLUTIONS = (Resolution(1.0, ''), Resolution(2.0, '@2x'))


@dataclass
class SpriteConfig:
    """Settings shared, read-only, by every pass."""
    input_dirs: List[str]
    output_dir: str
    max_width: int
    max_height: int
    resolutions: Tuple[Resolution, ...] = DEFAULT_RESOLUTIONS
    placement: HeuristicType = HeuristicType.BEST_AREA_FIT
    split: SplitHeuristic = SplitHeuristic.MIN_AREA
    jobs: int = 1

    def validate(self):
        if not self.input_dirs:
            raise ConfigurationError("no SVG directories")
        if self.max_width <= 0 or self.max_height <= 0:
            raise ConfigurationError(
                f"maximum size must be positive, got {self.max_width}×{self.max_height}")
        if not self.resolutions:
            raise ConfigurationError("no output resolutions")
        suffixes = [r.suffix for r in self.resolutions]
        if len(set(suffixes)) != len(suffixes):
            raise ConfigurationError(f"output suffixes are not unique: {suffixes}")
        for resolution in self.resolutions:
            width, height = canvas_bound(self.max_width, self.max_height, resolution.scale)
            if width <= 0 or height <= 0:
                raise ConfigurationError(
                    f"{resolution.label} canvas would be {width}×{height}")
        if self.jobs < 1:
            raise ConfigurationError(f"jobs must be at least 1, got {self.jobs}")


def canvas_bound(max_width: int, max_height: int, scale: float) -> Tuple[int, int]:
    return math.floor(max_width * scale), math.floor(max_height * scale)


class SpritePass:
    """One resolution pass; owns the name → SourceImage mapping it ingests."""

    def __init__(self, resolution: Resolution, max_width: int, max_height: int,
                 fonts: FontRegistry,
                 placement: HeuristicType = HeuristicType.BEST_AREA_FIT,
                 split: SplitHeuristic = SplitHeuristic.MIN_AREA):
        self.resolution = resolution
        self.width, self.height = canvas_bound(max_width, max_height, resolution.scale)
        self.fonts = fonts
        self.placement = placement
        self.split = split
        self.images: Dict[str, SourceImage] = {}

    @property
    def scale(self) -> float:
        return self.resolution.scale

    def add(self, image: SourceImage):
        if image.name in self.images:
            raise DuplicateNameError(image.name, image.path)

        dropped = convert_text(image.content, self.fonts)
        if dropped:
            print(f"Warning: {image.name}: no installed font for {dropped} text element(s), "
                  f"they will not be rendered")
        self.images[image.name] = image

    def ingest_directory(self, directory: str):
        """Add every .svg file directly inside directory, in file name order."""
        print(f"importing SVGs from directory {directory} ({self.resolution.label})")
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise SpriteIOError(f"cannot read directory ({e.strerror or e})", directory) from e

        for entry in entries:
            name, extension = os.path.splitext(entry.name)
            if extension.lower() != SVG_EXTENSION or not entry.is_file():
                continue

            print(f"\t{entry.path}")
            try:
                with open(entry.path, 'rb') as f:
                    data = f.read()
            except OSError as e:
                raise SpriteIOError(f"cannot read file ({e.strerror or e})", entry.path) from e

            self.add(parse_svg(data, name, entry.path))

    def pack(self) -> PackResult:
        items = [(name, *image.pixel_size(self.scale)) for name, image in self.images.items()]
        return pack(self.width, self.height, items, self.placement, self.split)

    def build(self) -> Atlas:
        """Pack the ingested images and assemble them into an atlas.

        The images are handed over to the atlas and forgotten by the pass.
        """
        if not self.images:
            raise ConfigurationError("no SVG files found in the input directories")

        result = self.pack()
        entries = []
        for name, image in self.images.items():
            placement = result.placements[name]
            entries.append((image, placement, compose(image, self.scale, placement)))

        atlas = build_atlas(result.width, result.height, self.scale, entries)
        self.images = {}
        return atlas


class PassOutput(NamedTuple):
    resolution: Resolution
    atlas: Atlas
    image: Image.Image
    manifest: Dict[str, ManifestEntry]


def run_pass(config: SpriteConfig, resolution: Resolution, fonts: FontRegistry) -> PassOutput:
    """Ingest, pack, compose, render and describe one resolution."""
    sprite_pass = SpritePass(resolution, config.max_width, config.max_height, fonts,
                             config.placement, config.split)
    try:
        for directory in config.input_dirs:
            sprite_pass.ingest_directory(directory)

        atlas = sprite_pass.build()
        print(f"rendering {resolution.describe('image')} ({atlas.width}×{atlas.height})")
        image = render_png(atlas)
        manifest = build_manifest(atlas.placements)
    except SpriteError as e:
        e.for_pass(resolution.label)
        raise

    return PassOutput(resolution, atlas, image, manifest)


def run_pipeline(config: SpriteConfig, fonts: FontRegistry) -> List[PassOutput]:
    """Run every resolution pass, in parallel when config.jobs > 1."""
    config.validate()

    if config.jobs > 1 and len(config.resolutions) > 1:
        workers = min(config.jobs, len(config.resolutions))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(run_pass, config, resolution, fonts)
                       for resolution in config.resolutions]
            return [future.result() for future in futures]

    return [run_pass(config, resolution, fonts) for resolution in config.resolutions]


def artifact_paths(output_dir: str, resolution: Resolution) -> Tuple[str, str]:
    base = os.path.join(output_dir, f"sprite{resolution.suffix}")
    return base + '.png', base + '.json'


def _roll_back(staged, backups, committed):
    """Undo a partial write: drop new files and put previous ones back."""
    for final_path in committed:
        if os.path.exists(final_path):
            os.remove(final_path)
    for backup_path, final_path in backups:
        os.replace(backup_path, final_path)
    for temp_path, _ in staged:
        if os.path.exists(temp_path):
            os.remove(temp_path)


def write_artifacts(outputs: Sequence[PassOutput], output_dir: str) -> List[str]:
    """Write the PNG and JSON of every pass; either all of them or none.

    Files are staged as `.tmp` next to their targets. Targets left by an
    earlier run are moved aside to `.bak` and restored if any step fails.
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise SpriteIOError(f"cannot create output directory ({e.strerror or e})", output_dir) from e

    staged = []
    backups = []
    committed = []
    try:
        for output in outputs:
            png_path, json_path = artifact_paths(output_dir, output.resolution)

            print(f"writing {output.resolution.describe('image')}")
            staged.append((png_path + '.tmp', png_path))
            output.image.save(png_path + '.tmp', 'PNG')

            print(f"writing {output.resolution.describe('json')}")
            staged.append((json_path + '.tmp', json_path))
            with open(json_path + '.tmp', 'w', encoding='utf-8') as f:
                f.write(manifest_to_json(output.manifest))

        for _, final_path in staged:
            if os.path.exists(final_path):
                os.replace(final_path, final_path + '.bak')
                backups.append((final_path + '.bak', final_path))

        for temp_path, final_path in staged:
            os.replace(temp_path, final_path)
            committed.append(final_path)
    except Exception as e:
        _roll_back(staged, backups, committed)
        reason = getattr(e, 'strerror', None) or e
        raise SpriteIOError(f"cannot write output ({reason})",
                            getattr(e, 'filename', None) or output_dir) from e

    for backup_path, _ in backups:
        os.remove(backup_path)

    return [final_path for _, final_path in staged]


def build_sprites(config: SpriteConfig, fonts: Optional[FontRegistry] = None) -> List[PassOutput]:
    """Build every resolution in memory, then write all artifacts."""
    config.validate()
    if fonts is None:
        fonts = FontRegistry.from_system()
        print(f"loaded {len(fonts)} font families")

    outputs = run_pipeline(config, fonts)
    write_artifacts(outputs, config.output_dir)
    return outputs
