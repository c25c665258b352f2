"""
Heuristic catalogue and finding types.

Nielsen's ten usability heuristics form a closed enumeration shared by the
evaluator, the cross-validator and the scorer. Unknown names are rejected
instead of silently falling back to a default weight.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from ..exceptions import UnknownHeuristicError


class Severity(Enum):
    """Severity of a violation, with its scoring weight and merge rank."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return _SEVERITY_WEIGHTS[self]

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]


_SEVERITY_WEIGHTS = {Severity.HIGH: 12, Severity.MEDIUM: 6, Severity.LOW: 2}
_SEVERITY_RANKS = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


class Heuristic(Enum):
    """
    Nielsen's ten usability heuristics.

    Each member's value is its stable id. Number, display name, short
    label and research-backed weight are exposed as properties.
    """
    VISIBILITY = "visibility"
    MATCH_REAL_WORLD = "match_real_world"
    USER_CONTROL = "user_control"
    CONSISTENCY = "consistency"
    ERROR_PREVENTION = "error_prevention"
    RECOGNITION = "recognition"
    FLEXIBILITY = "flexibility"
    MINIMALIST = "minimalist"
    ERROR_RECOVERY = "error_recovery"
    HELP_DOCUMENTATION = "help_documentation"

    @property
    def id(self) -> str:
        return self.value

    @property
    def number(self) -> int:
        return _CATALOGUE[self][0]

    @property
    def title(self) -> str:
        return _CATALOGUE[self][1]

    @property
    def display_name(self) -> str:
        return f"#{self.number}: {self.title}"

    @property
    def weight(self) -> float:
        return _CATALOGUE[self][2]

    @property
    def description(self) -> str:
        return _CATALOGUE[self][3]

    @classmethod
    def parse(cls, value: Union["Heuristic", str, int]) -> "Heuristic":
        """
        Resolve a heuristic from an id, number, display name or short label.

        Raises:
            UnknownHeuristicError: If the value matches no heuristic
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise UnknownHeuristicError(f"Unknown heuristic: {value!r}")
        if isinstance(value, int):
            for heuristic in cls:
                if heuristic.number == value:
                    return heuristic
            raise UnknownHeuristicError(f"Unknown heuristic number: {value}")
        if not isinstance(value, str):
            raise UnknownHeuristicError(f"Unknown heuristic: {value!r}")

        key = _normalize_key(value)
        if key.isdigit():
            return cls.parse(int(key))
        heuristic = _LOOKUP.get(key)
        if heuristic is None:
            raise UnknownHeuristicError(f"Unknown heuristic: {value!r}")
        return heuristic


# number, title, weight, description
_CATALOGUE = {
    Heuristic.VISIBILITY: (
        1, "Visibility of System Status", 1.2,
        "System should inform users about what's happening"),
    Heuristic.MATCH_REAL_WORLD: (
        2, "Match Between System and Real World", 0.9,
        "Use familiar language and conventions"),
    Heuristic.USER_CONTROL: (
        3, "User Control and Freedom", 1.0,
        "Provide undo/redo and easy exits"),
    Heuristic.CONSISTENCY: (
        4, "Consistency and Standards", 1.0,
        "Follow platform conventions"),
    Heuristic.ERROR_PREVENTION: (
        5, "Error Prevention", 1.2,
        "Prevent problems before they occur"),
    Heuristic.RECOGNITION: (
        6, "Recognition Rather Than Recall", 1.0,
        "Minimize memory load"),
    Heuristic.FLEXIBILITY: (
        7, "Flexibility and Efficiency of Use", 0.8,
        "Accelerators for expert users"),
    Heuristic.MINIMALIST: (
        8, "Aesthetic and Minimalist Design", 0.8,
        "Remove irrelevant information"),
    Heuristic.ERROR_RECOVERY: (
        9, "Help Users Recognize, Diagnose, and Recover from Errors", 1.1,
        "Clear error messages with solutions"),
    Heuristic.HELP_DOCUMENTATION: (
        10, "Help and Documentation", 0.7,
        "Provide searchable, context-sensitive help"),
}

# Short labels used by the heuristic selector in the surrounding application
_ALIASES = {
    "match": Heuristic.MATCH_REAL_WORLD,
    "control": Heuristic.USER_CONTROL,
    "aesthetic": Heuristic.MINIMALIST,
    "help": Heuristic.HELP_DOCUMENTATION,
}


def _normalize_key(value: str) -> str:
    key = value.strip().lower()
    # "#1: Visibility of System Status" -> "visibility of system status"
    key = re.sub(r"^#\s*\d+\s*:\s*", "", key)
    key = key.lstrip("#").strip()
    return re.sub(r"[^a-z0-9]+", "_", key).strip("_")


def _build_lookup() -> Dict[str, Heuristic]:
    lookup: Dict[str, Heuristic] = {}
    for heuristic in Heuristic:
        lookup[heuristic.id] = heuristic
        lookup[_normalize_key(heuristic.title)] = heuristic
        lookup[_normalize_key(heuristic.name)] = heuristic
    for alias, heuristic in _ALIASES.items():
        lookup[alias] = heuristic
    return lookup


_LOOKUP = _build_lookup()

ALL_HEURISTICS: List[Heuristic] = list(Heuristic)


def parse_selection(
    selection: Union[None, str, Iterable[Union[Heuristic, str, int]]] = None
) -> List[Heuristic]:
    """
    Resolve a caller's heuristic selection.

    Args:
        selection: None or "all" for all ten heuristics, a comma-separated
            string, a single number or member, or an iterable of
            ids/numbers/names/members

    Returns:
        Selected heuristics in canonical order, without duplicates

    Raises:
        UnknownHeuristicError: If any entry is unknown or the selection is empty
    """
    if selection is None:
        return list(ALL_HEURISTICS)
    if isinstance(selection, str):
        if selection.strip().lower() in ("all", "*", ""):
            return list(ALL_HEURISTICS)
        selection = [part for part in selection.split(",") if part.strip()]
    elif isinstance(selection, (Heuristic, int)):
        selection = [selection]
    elif not isinstance(selection, Iterable):
        raise UnknownHeuristicError(f"Unknown heuristic selection: {selection!r}")

    chosen = {Heuristic.parse(item) for item in selection}
    if not chosen:
        raise UnknownHeuristicError("Heuristic selection is empty")
    return [h for h in ALL_HEURISTICS if h in chosen]


@dataclass(frozen=True)
class BoundingBox:
    """Percentage-coordinate rectangle within the screenshot (0-100 per axis)."""
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class HeuristicViolation:
    """A specific, evidenced usability problem tied to one heuristic."""
    heuristic: Heuristic
    severity: Severity
    title: str
    description: str
    location: str
    recommendation: str
    page_element: str
    research_backing: str
    user_impact: str
    bounding_box: Optional[BoundingBox] = None

    @property
    def penalty(self) -> float:
        return self.severity.weight * self.heuristic.weight

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heuristic": self.heuristic.display_name,
            "heuristicId": self.heuristic.id,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "recommendation": self.recommendation,
            "pageElement": self.page_element,
            "boundingBox": self.bounding_box.to_dict() if self.bounding_box else None,
            "researchBacking": self.research_backing,
            "userImpact": self.user_impact,
        }


@dataclass(frozen=True)
class HeuristicStrength:
    """A positive usability observation tied to one heuristic."""
    heuristic: Heuristic
    description: str
    example: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "heuristic": self.heuristic.display_name,
            "heuristicId": self.heuristic.id,
            "description": self.description,
            "example": self.example,
        }
