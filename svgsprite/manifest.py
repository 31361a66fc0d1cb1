import json
from dataclasses import dataclass
from typing import Dict, Mapping

from .packer import Rectangle


@dataclass(frozen=True)
class ManifestEntry:
    """Where one sprite landed on the atlas."""
    x: int
    y: int
    width: int
    height: int
    # Always 1, even for the @2x sheet; the resolution is carried by the file suffix
    pixel_ratio: int = 1

    def to_dict(self) -> Dict[str, int]:
        return {
            "height": self.height,
            "width": self.width,
            "pixelRatio": self.pixel_ratio,
            "x": self.x,
            "y": self.y,
        }


def build_manifest(placements: Mapping[str, Rectangle]) -> Dict[str, ManifestEntry]:
    """Map every sprite name to its manifest entry, ordered by name."""
    return {
        name: ManifestEntry(placements[name].x, placements[name].y,
                            placements[name].width, placements[name].height)
        for name in sorted(placements)
    }


def manifest_to_json(manifest: Mapping[str, ManifestEntry]) -> str:
    data = {name: manifest[name].to_dict() for name in sorted(manifest)}
    return json.dumps(data, indent=2) + "\n"
