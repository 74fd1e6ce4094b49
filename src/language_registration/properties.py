"""Properties-file rendering compatible with ``java.util.Properties.store``.

Keys and values are escaped so the output is pure ASCII: characters
outside the printable ASCII range become ``\\uXXXX`` escapes of their
UTF-16 code units, and the characters that carry meaning in the format
(``=``, ``:``, ``#``, ``!``, backslash and whitespace) are backslash
escaped. Entries are written in ascending key order.
"""

from collections.abc import Mapping

OUTPUT_ENCODING = "iso-8859-1"
LINE_SEPARATOR = "\n"

_SIMPLE_ESCAPES = {
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
    "\\": "\\\\",
}


def _utf16_units(char: str) -> list[int]:
    encoded = char.encode("utf-16-be", "surrogatepass")
    return [int.from_bytes(encoded[i : i + 2], "big") for i in range(0, len(encoded), 2)]


def _unicode_escape(char: str) -> str:
    return "".join(f"\\u{unit:04X}" for unit in _utf16_units(char))


def escape(text: str, *, escape_space: bool) -> str:
    """Escape a key or value.

    Args:
        text: Raw key or value
        escape_space: Escape every space (keys) instead of only a leading one (values)

    Returns:
        Escaped ASCII text

    """
    out: list[str] = []
    for index, char in enumerate(text):
        if char == " ":
            out.append("\\ " if index == 0 or escape_space else " ")
        elif char in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[char])
        elif " " < char <= "~":
            out.append(char)
        else:
            out.append(_unicode_escape(char))
    return "".join(out)


def escape_key(key: str) -> str:
    return escape(key, escape_space=True)


def escape_value(value: str) -> str:
    return escape(value, escape_space=False)


def format_comment(comment: str) -> list[str]:
    """Render a comment as ``#`` lines.

    Line breaks inside the comment start a new comment line unless the
    following text already starts with a comment character. Characters
    above U+00FF are unicode escaped; everything else is written as is.
    """
    lines: list[str] = []
    for line in comment.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        escaped = "".join(
            char if char <= "\u00ff" else _unicode_escape(char) for char in line
        )
        if not lines or not escaped.startswith(("#", "!")):
            escaped = f"#{escaped}"
        lines.append(escaped)
    return lines


def render_properties(properties: Mapping[str, str], comment: str | None = None) -> str:
    """Render a mapping as properties text with keys in ascending string order.

    Args:
        properties: Key/value pairs; insertion order is ignored
        comment: Optional leading comment

    Returns:
        Properties text, one ``key=value`` line per entry

    """
    lines: list[str] = []
    if comment is not None:
        lines.extend(format_comment(comment))
    for key in sorted(properties):
        lines.append(f"{escape_key(key)}={escape_value(properties[key])}")
    return "".join(f"{line}{LINE_SEPARATOR}" for line in lines)


def dump_properties(properties: Mapping[str, str], comment: str | None = None) -> bytes:
    """Render properties and encode them for writing."""
    return render_properties(properties, comment).encode(OUTPUT_ENCODING)
