import os
import tempfile
import unittest

from svgsprite.fonts import FontRegistry, convert_text
from svgsprite.svg import parse_svg, svg_tag

from tests.fixtures import SVG_HEADER


def text_tree(body, root_attributes=''):
    data = f'{SVG_HEADER} width="10" height="10" {root_attributes}>{body}</svg>'.encode()
    return parse_svg(data, "label").content


class FontRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = FontRegistry(["DejaVu Sans", "DejaVu Serif", "Noto Sans Mono"])

    def test_first_installed_family_wins(self) -> None:
        self.assertEqual(self.registry.resolve("Missing, 'dejavu serif', DejaVu Sans"), "DejaVu Serif")

    def test_generic_families(self) -> None:
        self.assertEqual(self.registry.resolve("sans-serif"), "DejaVu Sans")
        self.assertEqual(self.registry.resolve("monospace"), "Noto Sans Mono")
        # Nothing preferred is installed, fall back to any family
        self.assertEqual(self.registry.resolve("fantasy"), "DejaVu Sans")

    def test_nothing_resolves_in_empty_registry(self) -> None:
        self.assertIsNone(FontRegistry().resolve("serif, Arial"))

    def test_from_system_skips_unreadable_files(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with open(os.path.join(td, "broken.ttf"), "wb") as f:
                f.write(b"not a font")
            registry = FontRegistry.from_system([td, os.path.join(td, "missing")])
        self.assertEqual(len(registry), 0)


class ConvertTextTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = FontRegistry(["DejaVu Sans", "DejaVu Serif"])

    def test_family_is_pinned_on_text(self) -> None:
        root = text_tree('<text font-family="Comic, sans-serif">hi</text>')
        self.assertEqual(convert_text(root, self.registry), 0)
        self.assertEqual(root.find(svg_tag("text")).get("font-family"), "'DejaVu Sans'")

    def test_family_is_inherited_from_ancestors(self) -> None:
        root = text_tree('<g><text>hi</text></g>', 'font-family="DejaVu Serif"')
        convert_text(root, self.registry)
        text = root.find(f"{svg_tag('g')}/{svg_tag('text')}")
        self.assertEqual(text.get("font-family"), "'DejaVu Serif'")

    def test_style_declaration_is_rewritten(self) -> None:
        root = text_tree('<text style="fill: red; font-family: sans-serif">hi</text>')
        convert_text(root, self.registry)
        text = root.find(svg_tag("text"))
        self.assertEqual(text.get("style"), "fill: red; font-family: 'DejaVu Sans'")
        self.assertIsNone(text.get("font-family"))

    def test_unresolvable_text_is_removed(self) -> None:
        root = text_tree('<text font-family="Nope">gone</text><rect width="1" height="1"/>')
        self.assertEqual(convert_text(root, FontRegistry(["Other"])), 1)
        self.assertIsNone(root.find(svg_tag("text")))
        self.assertIsNotNone(root.find(svg_tag("rect")))


if __name__ == "__main__":
    unittest.main()
