"""
Font lookup for text inside SVG sprites.

The registry is built once per invocation and only read afterwards, so it can
be shared by every resolution pass.
"""

import os
import sys
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional

from PIL import ImageFont

from .svg import local_name

FONT_EXTENSIONS = ('.ttf', '.otf', '.ttc')

# Preferred installed families for the CSS generic families, in order
GENERIC_FAMILIES = {
    'serif': ['Times New Roman', 'DejaVu Serif', 'Liberation Serif', 'Noto Serif', 'Georgia'],
    'sans-serif': ['Arial', 'Helvetica', 'DejaVu Sans', 'Liberation Sans', 'Noto Sans', 'Verdana'],
    'monospace': ['Courier New', 'DejaVu Sans Mono', 'Liberation Mono', 'Noto Sans Mono', 'Menlo'],
    'cursive': ['Comic Sans MS', 'Apple Chancery'],
    'fantasy': ['Impact', 'Papyrus'],
}

# Used when a text element does not name any family
DEFAULT_FAMILY = 'serif'

TEXT_ELEMENTS = ('text', 'tspan', 'textPath')


def system_font_dirs() -> List[str]:
    """Directories that usually hold installed fonts on this platform."""
    home = os.path.expanduser('~')
    if sys.platform == 'win32':
        windir = os.environ.get('WINDIR', r'C:\Windows')
        return [os.path.join(windir, 'Fonts'),
                os.path.join(os.environ.get('LOCALAPPDATA', home), 'Microsoft', 'Windows', 'Fonts')]
    if sys.platform == 'darwin':
        return ['/System/Library/Fonts', '/Library/Fonts', os.path.join(home, 'Library', 'Fonts')]
    return ['/usr/share/fonts', '/usr/local/share/fonts',
            os.path.join(home, '.fonts'), os.path.join(home, '.local', 'share', 'fonts')]


class FontRegistry:
    """Read-only set of installed font families, looked up case-insensitively."""

    def __init__(self, families: Iterable[str] = ()):
        self._families: Dict[str, str] = {}
        for family in families:
            self._families.setdefault(family.lower(), family)

    @classmethod
    def from_system(cls, font_dirs: Optional[Iterable[str]] = None) -> 'FontRegistry':
        """Enumerate font files under the given (or the platform's) font directories."""
        families = []
        for font_dir in (system_font_dirs() if font_dirs is None else font_dirs):
            if not os.path.isdir(font_dir):
                continue
            for dirpath, _, filenames in os.walk(font_dir):
                for filename in sorted(filenames):
                    if not filename.lower().endswith(FONT_EXTENSIONS):
                        continue
                    try:
                        font = ImageFont.truetype(os.path.join(dirpath, filename), size=12)
                    except OSError:
                        # Not a font Pillow can read; it cannot render either
                        continue
                    family, _ = font.getname()
                    if family:
                        families.append(family)
        return cls(families)

    def __len__(self):
        return len(self._families)

    def __contains__(self, family: str) -> bool:
        return family.lower() in self._families

    @property
    def families(self) -> List[str]:
        return sorted(self._families.values())

    def resolve(self, family_list: str) -> Optional[str]:
        """Return the first installed family named in a CSS font-family list."""
        for candidate in family_list.split(','):
            candidate = candidate.strip().strip('"\'').strip()
            if not candidate:
                continue
            key = candidate.lower()
            if key in GENERIC_FAMILIES:
                for preferred in GENERIC_FAMILIES[key]:
                    if preferred.lower() in self._families:
                        return self._families[preferred.lower()]
                # Any installed family beats no text at all
                if self._families:
                    return self.families[0]
                continue
            if key in self._families:
                return self._families[key]
        return None


def _style_declarations(style: str) -> List[List[str]]:
    declarations = []
    for item in style.split(';'):
        if ':' in item:
            key, value = item.split(':', 1)
            declarations.append([key.strip(), value.strip()])
    return declarations


def _font_family(element: ET.Element) -> Optional[str]:
    """The font-family declared directly on element; style wins over the attribute."""
    for key, value in _style_declarations(element.get('style', '')):
        if key == 'font-family':
            return value
    return element.get('font-family')


def _set_font_family(element: ET.Element, family: str):
    value = f"'{family}'"
    declarations = _style_declarations(element.get('style', ''))
    if any(key == 'font-family' for key, _ in declarations):
        for declaration in declarations:
            if declaration[0] == 'font-family':
                declaration[1] = value
        element.set('style', '; '.join(f"{k}: {v}" for k, v in declarations))
    else:
        element.set('font-family', value)


def convert_text(root: ET.Element, registry: FontRegistry) -> int:
    """Pin every text element in root to an installed font family, in place.

    Text whose family list names nothing installed is removed so that it is
    consistently left unrendered. Returns the number of removed elements.
    """
    removed = 0

    def visit(element: ET.Element, inherited: str):
        nonlocal removed
        for child in list(element):
            family = _font_family(child) or inherited
            if local_name(child.tag) in TEXT_ELEMENTS:
                resolved = registry.resolve(family)
                if resolved is None:
                    element.remove(child)
                    removed += 1
                    continue
                _set_font_family(child, resolved)
            visit(child, family)

    visit(root, _font_family(root) or DEFAULT_FAMILY)
    return removed
