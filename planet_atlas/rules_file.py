"""Loading and saving measured planet distances.

Three formats are understood, chosen by file suffix:

* ``.xml``: ``<ArrayOfBindRule>`` with one ``<BindRule PlanetOne=".." PlanetTwo=".." Distance=".."/>``
  element per measurement (the ``rules.xml`` layout).
* ``.json``: a list (or ``{"rules": [...]}``) of objects with
  ``planet_one``/``planet_two``/``distance`` keys; the XML attribute names are
  accepted too.
* anything else: plain text, one ``A,B,distance`` record per line, ``#`` starts a comment.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as StdET
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from .constraints import Constraint, ConstraintError, ConstraintSet, make_constraint

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_KEY_ALIASES = {
    "planet_one": ("planet_one", "PlanetOne", "a"),
    "planet_two": ("planet_two", "PlanetTwo", "b"),
    "distance": ("distance", "Distance"),
}


def _local_tag(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _pick(record: Mapping[str, Any], field_name: str, position: int) -> Any:
    for key in _KEY_ALIASES[field_name]:
        if key in record:
            return record[key]
    raise ConstraintError(f"[rule {position}] missing '{field_name}'")


def parse_xml_rules(text: str) -> ConstraintSet:
    try:
        root = ET.fromstring(text)
    except (ET.ParseError, DefusedXmlException) as exc:
        raise ConstraintError(f"invalid rules XML: {exc}") from exc

    constraints: List[Constraint] = []
    rules = [element for element in root.iter() if _local_tag(element.tag) == "BindRule"]
    for position, element in enumerate(rules, start=1):
        constraints.append(
            make_constraint(
                _pick(element.attrib, "planet_one", position),
                _pick(element.attrib, "planet_two", position),
                _pick(element.attrib, "distance", position),
                position=position,
            )
        )
    return ConstraintSet(constraints)


def parse_json_rules(text: str) -> ConstraintSet:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConstraintError(f"invalid rules JSON: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("rules")
    if not isinstance(payload, list):
        raise ConstraintError("rules JSON must be a list or an object with a 'rules' list")

    constraints: List[Constraint] = []
    for position, record in enumerate(payload, start=1):
        if isinstance(record, Mapping):
            fields = (
                _pick(record, "planet_one", position),
                _pick(record, "planet_two", position),
                _pick(record, "distance", position),
            )
        elif isinstance(record, (list, tuple)) and len(record) == 3:
            fields = tuple(record)
        else:
            raise ConstraintError(f"[rule {position}] expected an object or a 3-item list, got {record!r}")
        constraints.append(make_constraint(*fields, position=position))
    return ConstraintSet(constraints)


def parse_text_rules(text: str) -> ConstraintSet:
    constraints: List[Constraint] = []
    position = 0
    for line in text.splitlines():
        content = line.split("#", 1)[0].strip()
        if not content:
            continue
        position += 1
        parts = [part.strip() for part in content.split(",")]
        if len(parts) != 3:
            raise ConstraintError(f"[rule {position}] expected 'A,B,distance', got {content!r}")
        constraints.append(make_constraint(*parts, position=position))
    return ConstraintSet(constraints)


def load_rules(path: PathLike) -> ConstraintSet:
    """Read a constraint set from ``path``; the suffix selects the format."""

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix == ".xml":
        rules = parse_xml_rules(text)
    elif suffix == ".json":
        rules = parse_json_rules(text)
    else:
        rules = parse_text_rules(text)
    logger.info(
        "Loaded %d rule(s) over %d planet(s) from %s", len(rules), len(rules.planets), path
    )
    return rules


def rules_to_xml(constraints: Iterable[Constraint]) -> str:
    root = StdET.Element("ArrayOfBindRule")
    for constraint in constraints:
        StdET.SubElement(
            root,
            "BindRule",
            {
                "PlanetOne": constraint.planet_one,
                "PlanetTwo": constraint.planet_two,
                "Distance": repr(float(constraint.distance)),
            },
        )
    body = StdET.tostring(root, encoding="unicode")
    return '<?xml version="1.0"?>\n' + body + "\n"


def save_rules(path: PathLike, constraints: Iterable[Constraint]) -> Path:
    """Write ``constraints`` in the XML layout understood by :func:`load_rules`."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(rules_to_xml(constraints), encoding="utf-8")
    return path


__all__ = [
    "load_rules",
    "parse_json_rules",
    "parse_text_rules",
    "parse_xml_rules",
    "rules_to_xml",
    "save_rules",
]
