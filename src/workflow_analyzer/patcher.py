from __future__ import annotations
import copy
import logging
import re
from typing import Container, Iterable, List, Optional, Sequence, Union
from .models import IssueRecord, JsonValue
logger = logging.getLogger(__name__)
Segment = Union[str, int]
# Same grammar lodash uses for property paths: dotted names, bracketed
# numbers and quoted bracket keys ("a.b[0]['c.d']").
_PATH_TOKEN = re.compile(
    r"""[^.[\]]+|\[(?:(-?\d+(?:\.\d+)?)|(["'])((?:(?!\2)[^\\]|\\.)*?)\2)\]|(?=(?:\.|\[\])(?:\.|\[\]|$))"""
)
_ESCAPED_CHAR = re.compile(r"\\(\\)?")
_INDEX = re.compile(r"0|[1-9][0-9]*")
def _as_index(segment: Segment) -> Optional[int]:
    if isinstance(segment, bool):
        return None
    if isinstance(segment, int):
        return segment if segment >= 0 else None
    if _INDEX.fullmatch(segment):
        return int(segment)
    return None
def parse_path(path: str) -> List[Segment]:
    """Split a locator like ``nodes[0].parameters.url`` into segments.

    Unquoted non-negative integers become ``int`` so a missing container
    in front of them is created as a list.
    """
    segments: List[Segment] = []
    if not path:
        return segments
    if path.startswith("."):
        segments.append("")
    for match in _PATH_TOKEN.finditer(path):
        number, quote, quoted = match.group(1), match.group(2), match.group(3)
        if quote:
            segments.append(_ESCAPED_CHAR.sub(lambda m: m.group(1) or "", quoted))
            continue
        key = number if number is not None else match.group(0)
        index = _as_index(key)
        segments.append(index if index is not None else key)
    return segments
def set_path(document: JsonValue, path: Union[str, Sequence[Segment]], value: JsonValue) -> JsonValue:
    """Write ``value`` at ``path`` inside ``document``, creating containers as needed.

    The document is modified in place and returned. A segment that cannot
    address the container it lands on (a name on a list) skips the write.
    """
    segments = parse_path(path) if isinstance(path, str) else list(path)
    if not segments:
        return document
    if not isinstance(document, (dict, list)):
        logger.warning("Cannot write %r into a %s document", path, type(document).__name__)
        return document
    node: Union[dict, list] = document
    last = len(segments) - 1
    for position, segment in enumerate(segments):
        key: Segment
        if isinstance(node, list):
            index = _as_index(segment)
            if index is None:
                logger.warning("Skipping write to %r: %r is not a list index", path, segment)
                return document
            if index >= len(node):
                node.extend([None] * (index + 1 - len(node)))
            key = index
            current = node[index]
        else:
            key = str(segment)
            current = node.get(key)
        if position == last:
            node[key] = value  # type: ignore[index]
            return document
        if not isinstance(current, (dict, list)):
            current = [] if _as_index(segments[position + 1]) is not None else {}
            node[key] = current  # type: ignore[index]
        node = current
    return document
def apply_patches(
    original: JsonValue,
    issues: Optional[Iterable[IssueRecord]],
    approved: Container[str],
) -> Optional[JsonValue]:
    """Return a corrected copy of ``original`` with the approved patches applied.

    Patches run in issue order; when two approved patches target the same
    path the later one wins. ``original`` is never modified.
    """
    if original is None or issues is None:
        return None
    corrected = copy.deepcopy(original)
    for issue in issues:
        if issue.id not in approved:
            continue
        logger.debug("Applying fix %s at %r", issue.id, issue.patch.path)
        corrected = set_path(corrected, issue.patch.path, copy.deepcopy(issue.patch.new_value))
    return corrected
