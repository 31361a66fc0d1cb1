"""
Stylesheet resolution for single SVG documents.

Rules from every `<style>` element are matched against the document and
written into each element's `style` attribute, after which the sheets are
removed. A document resolved this way keeps its look when its elements are
moved into another document with a different set of rules.
"""

import xml.etree.ElementTree as ET
from typing import List, Tuple

import cssselect2
import tinycss2

Declaration = Tuple[str, str, bool]


def _declarations(content) -> List[Declaration]:
    result = []
    for node in tinycss2.parse_declaration_list(content, skip_whitespace=True, skip_comments=True):
        if node.type != "declaration":
            continue
        value = tinycss2.serialize(node.value).strip()
        if value:
            result.append((node.lower_name, value, node.important))
    return result


def _serialize(declarations) -> str:
    merged = {}
    for name, value in declarations:
        merged.pop(name, None)
        merged[name] = value
    return ";".join(f"{name}:{value}" for name, value in merged.items())


def _is_css(style: ET.Element) -> bool:
    kind = style.get("type")
    return not kind or kind.strip().lower() == "text/css"


def inline_stylesheets(root: ET.Element, style_tag: str) -> int:
    """Move the rules of every `<style>` under root into style attributes.

    Returns the number of style elements removed. Existing style attributes
    win over sheet rules unless the rule is `!important`. At-rules and
    selectors cssselect2 cannot compile are ignored, as a browser would.
    """
    parents = {child: parent for parent in root.iter() for child in parent}
    sheets = list(root.iter(style_tag))
    if not sheets:
        return 0

    matcher = cssselect2.Matcher()
    for sheet in sheets:
        if not _is_css(sheet):
            continue
        rules = tinycss2.parse_stylesheet(sheet.text or "", skip_whitespace=True, skip_comments=True)
        for rule in rules:
            if rule.type != "qualified-rule":
                continue
            declarations = _declarations(rule.content)
            if not declarations:
                continue
            try:
                selectors = cssselect2.compile_selector_list(rule.prelude)
            except cssselect2.SelectorError:
                continue
            for selector in selectors:
                if selector.pseudo_element is None:
                    matcher.add_selector(selector, declarations)

    for sheet in sheets:
        parents[sheet].remove(sheet)

    wrapper = cssselect2.ElementWrapper.from_xml_root(root)
    for node in wrapper.iter_subtree():
        matches = sorted(matcher.match(node), key=lambda match: match[:2])
        if not matches:
            continue
        element = node.etree_element
        normal, important = [], []
        for _specificity, _order, _pseudo, declarations in matches:
            for name, value, is_important in declarations:
                (important if is_important else normal).append((name, value))

        inline = _declarations(element.get("style", ""))
        normal.extend((name, value) for name, value, is_important in inline if not is_important)
        important.extend((name, value) for name, value, is_important in inline if is_important)
        element.set("style", _serialize(normal + important))

    return len(sheets)
