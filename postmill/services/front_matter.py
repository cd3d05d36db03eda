import re
from typing import Any, Dict, Tuple

import frontmatter
from frontmatter.default_handlers import BaseHandler

DELIMITER = "---"
LINE_PATTERN = re.compile(r"^(\w+):\s*(.*)$")
INTEGER_PATTERN = re.compile(r"[0-9]+")


class LineFrontMatterHandler(BaseHandler):
    """
    Tolerant, line-oriented front matter handler.

    Unlike the YAML handler it never raises on bad input: each line is a
    ``key: value`` pair whose type is decided by the shape of the value, and
    lines that don't look like that are skipped.
    """

    FM_BOUNDARY = re.compile(r"^-{3}\s*$", re.MULTILINE)
    START_DELIMITER = DELIMITER
    END_DELIMITER = DELIMITER

    def detect(self, text: str) -> bool:
        return text.split("\n", 1)[0].strip() == DELIMITER

    def split(self, text: str) -> Tuple[str, str]:
        lines = text.split("\n")
        if lines[0].strip() != DELIMITER:
            raise ValueError("text does not open with a front matter delimiter")

        for index in range(1, len(lines)):
            if lines[index].strip() == DELIMITER:
                return "\n".join(lines[1:index]), "\n".join(lines[index + 1 :])

        raise ValueError("front matter block is never closed")

    def load(self, fm: str, **kwargs) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        for line in fm.split("\n"):
            match = LINE_PATTERN.match(line.strip())
            if not match:
                continue
            key, raw_value = match.groups()
            metadata[key] = parse_value(raw_value)
        return metadata

    def export(self, metadata: Dict[str, Any], **kwargs) -> str:
        lines = []
        for key, value in metadata.items():
            if isinstance(value, (list, tuple)):
                value = "[" + ", ".join(str(item) for item in value) + "]"
            elif isinstance(value, bool):
                value = "true" if value else "false"
            lines.append(f"{key}: {value}")
        return "\n".join(lines)


def parse_value(raw_value: str) -> Any:
    """Type a raw front matter value by its shape."""
    value = raw_value.strip()

    if value.startswith("[") and value.endswith("]"):
        items = (item.strip().strip("\"'").strip() for item in value[1:-1].split(","))
        return [item for item in items if item]

    if len(value) >= 2 and value.startswith("'") and value.endswith("'"):
        return value[1:-1].replace("''", "'")

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('\\"', '"')

    if INTEGER_PATTERN.fullmatch(value):
        return int(value)

    if value == "true":
        return True
    if value == "false":
        return False

    return value


handler = LineFrontMatterHandler()


def split_front_matter(raw: str) -> Tuple[Dict[str, Any], str]:
    """Separate the metadata block from the body. Missing delimiters mean no metadata."""
    # frontmatter.parse strips the text first, so both delimiters are checked on the raw input
    if not handler.detect(raw):
        return {}, raw
    try:
        handler.split(raw)
    except ValueError:
        return {}, raw
    return frontmatter.parse(raw, handler=handler)
