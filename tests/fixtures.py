import os

SVG_HEADER = '<svg xmlns="http://www.w3.org/2000/svg"'


def square_svg(size, fill='black'):
    return (f'{SVG_HEADER} width="{size}" height="{size}" viewBox="0 0 {size} {size}">'
            f'<rect width="{size}" height="{size}" fill="{fill}"/></svg>')


def unit_svg(width, height, fill):
    """A width×height image whose content is one full-size rect in a 1×1 view box."""
    return (f'{SVG_HEADER} width="{width}" height="{height}" viewBox="0 0 1 1" '
            f'preserveAspectRatio="none"><rect width="1" height="1" fill="{fill}"/></svg>')


def write_svgs(directory, files):
    """Write {filename: svg text} into directory and return it."""
    os.makedirs(directory, exist_ok=True)
    for filename, text in files.items():
        with open(os.path.join(directory, filename), 'w', encoding='utf-8') as f:
            f.write(text)
    return directory


def cairo_available():
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True
