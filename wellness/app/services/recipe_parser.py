"""
Best-effort structuring of recipe replies.

Assistants answer recipe requests in loose markdown:

    # Lemon Chicken
    A bright weeknight dinner.

    ## What You'll Need
    - 1 lb chicken thighs

    ## What To Do
    1. Season the chicken.

    ## Play With Your Food / ## Summary / ## Recipe Info

The parser splits the text into lines once and runs an ordered list of
independent extractors over them. An extractor that finds nothing returns
None and the field keeps its default.
"""

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from ..models.recipe import Recipe, RecipeInfo

log = logging.getLogger(__name__)

Lines = Sequence[str]

HEADING = re.compile(r"^\s*(#{1,6})\s*(.*?)(?:\s+#+)?\s*$")
HORIZONTAL_RULE = re.compile(r"^\s*([-*_])(?:\s*\1){2,}\s*$")
TAGS_MARKER = re.compile(r"^\s*(?:\*\*)?Tags(?:\*\*)?\s*:\s*(?:\*\*)?\s*(?P<inline>.*)$", re.I)
BULLET = re.compile(r"^\s*[-*•]\s+(.*)$")

INGREDIENTS = re.compile(r"what\s+you(?:['’]ll|\s+will)\s+need", re.I)
INSTRUCTIONS = re.compile(r"what\s+to\s+do", re.I)
NOTES = re.compile(r"play\s+with\s+your\s+food", re.I)
SUMMARY = re.compile(r"\bsummary\b", re.I)
INFO = re.compile(r"recipe\s+info", re.I)

INFO_FIELDS = (
    ("servings", "Servings"),
    ("prep_minutes", r"Prep\s+Time"),
    ("cook_minutes", r"Cook\s+Time"),
    ("total_minutes", r"Total\s+Time"),
    ("calories_per_serving", "Calories"),
)
DIETARY_TAGS = r"Dietary\s+Tags"


def _heading(line: str) -> Optional[Tuple[int, str]]:
    match = HEADING.match(line)
    if not match:
        return None
    return len(match.group(1)), match.group(2).strip()


def _is_boundary(line: str) -> bool:
    heading = _heading(line)
    if heading and heading[0] <= 2:
        return True
    return bool(HORIZONTAL_RULE.match(line) or TAGS_MARKER.match(line))


def _block(lines: Lines, start: int) -> List[str]:
    """Lines from ``start`` up to the next section boundary."""
    body = []
    for line in lines[start:]:
        if _is_boundary(line):
            break
        body.append(line)
    return body


def _section(lines: Lines, pattern: re.Pattern) -> Optional[List[str]]:
    for idx, line in enumerate(lines):
        heading = _heading(line)
        if heading and heading[0] <= 2 and pattern.search(heading[1]):
            return _block(lines, idx + 1)
    return None


def _bullets(lines: Lines) -> List[str]:
    items = []
    for line in lines:
        match = BULLET.match(line)
        if match and match.group(1).strip():
            items.append(match.group(1).strip())
    return items


def _text(lines: Optional[Lines]) -> Optional[str]:
    if lines is None:
        return None
    return "\n".join(lines).strip()


def _split_commas(value: str) -> List[str]:
    value = value.replace("*", "")
    return [part.strip() for part in value.split(",") if part.strip()]


def _labelled(lines: Lines, label: str) -> Optional[str]:
    # "**Servings:** 4", "**Servings**: 4", "- Servings: 4"
    pattern = re.compile(rf"^[\s>*-]*{label}[^:\n]*?:\s*\**(?P<value>.*)$", re.I)
    for line in lines:
        match = pattern.match(line)
        if match:
            return match.group("value").strip()
    return None


def _first_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    match = re.search(r"\d+", value)
    return int(match.group()) if match else None


class RecipeParser:
    step_pattern = re.compile(r"^\s*(\d+)[.\)]\s*(.*)$")

    @staticmethod
    def extract_title(lines: Lines) -> Optional[str]:
        for line in lines:
            heading = _heading(line)
            if heading and heading[0] == 1:
                return heading[1]
        return None

    @staticmethod
    def extract_summary(lines: Lines) -> Optional[str]:
        # Intro paragraphs sit between the title and the first section
        start = 0
        for idx, line in enumerate(lines):
            heading = _heading(line)
            if heading and heading[0] == 1:
                start = idx + 1
                break
        return _text(_block(lines, start))

    @staticmethod
    def extract_ingredients(lines: Lines) -> Optional[List[str]]:
        body = _section(lines, INGREDIENTS)
        return _bullets(body) if body is not None else None

    @classmethod
    def extract_instructions(cls, lines: Lines) -> Optional[List[str]]:
        body = _section(lines, INSTRUCTIONS)
        if body is None:
            return None
        steps: List[str] = []
        for line in body:
            match = cls.step_pattern.match(line)
            if match and match.group(2).strip():
                steps.append(match.group(2).strip())
        return steps

    @staticmethod
    def extract_notes(lines: Lines) -> Optional[str]:
        return _text(_section(lines, NOTES))

    @staticmethod
    def extract_closing_summary(lines: Lines) -> Optional[str]:
        return _text(_section(lines, SUMMARY))

    @staticmethod
    def extract_tags(lines: Lines) -> Optional[List[str]]:
        for idx, line in enumerate(lines):
            match = TAGS_MARKER.match(line)
            if match:
                tags = _split_commas(match.group("inline"))
                return tags + _bullets(_block(lines, idx + 1))
        return None

    @staticmethod
    def extract_info(lines: Lines) -> Optional[RecipeInfo]:
        body = _section(lines, INFO)
        if body is None:
            return None
        values = {field: _first_int(_labelled(body, label)) for field, label in INFO_FIELDS}
        dietary = _labelled(body, DIETARY_TAGS)
        return RecipeInfo(
            dietary_tags=_split_commas(dietary) if dietary else [],
            **values,
        )

    @classmethod
    def extractors(cls) -> List[Tuple[str, Callable[[Lines], object]]]:
        """Field extractors in the order they run."""
        return [
            ("title", cls.extract_title),
            ("summary", cls.extract_summary),
            ("ingredients", cls.extract_ingredients),
            ("instructions", cls.extract_instructions),
            ("notes", cls.extract_notes),
            ("closing_summary", cls.extract_closing_summary),
            ("tags", cls.extract_tags),
            ("info", cls.extract_info),
        ]

    @classmethod
    def is_recipe_response(cls, text: Optional[str]) -> bool:
        if not text:
            return False
        for line in text.splitlines():
            heading = _heading(line)
            if heading and heading[0] <= 2:
                if INGREDIENTS.search(heading[1]) or INSTRUCTIONS.search(heading[1]):
                    return True
        return False

    @classmethod
    def parse(cls, raw: Optional[str]) -> Recipe:
        lines = (raw or "").splitlines()
        fields = {}
        for name, extractor in cls.extractors():
            value = extractor(lines)
            if value is not None:
                fields[name] = value
        log.debug(f"Parsed recipe fields: {sorted(fields)}")
        return Recipe(**fields)
