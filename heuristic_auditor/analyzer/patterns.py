"""
UI pattern database.

Research-backed component patterns (navigation, forms, buttons, errors,
loading, modals) with the markup indicators that reveal them. Matches for a
heuristic are added to that heuristic's evaluation context as extra signals.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .heuristics import Heuristic, Severity


@dataclass(frozen=True)
class Pattern:
    """A good or bad way of implementing a component."""
    description: str
    indicators: Tuple[str, ...]
    severity: Severity
    recommendation: str
    conversion_impact: Optional[str] = None
    # Matched when the component exists but none of the indicators do
    when_absent: bool = False


@dataclass(frozen=True)
class UIPattern:
    """Patterns for one UI component and the heuristics they inform."""
    component: str
    category: str
    triggers: Tuple[str, ...]
    heuristics: Tuple[Heuristic, ...]
    good_patterns: Tuple[Pattern, ...] = ()
    bad_patterns: Tuple[Pattern, ...] = ()


@dataclass(frozen=True)
class PatternMatch:
    """A pattern detected in a page."""
    component: str
    description: str
    good: bool
    severity: Severity
    recommendation: str
    conversion_impact: Optional[str] = None

    def describe(self) -> str:
        label = "GOOD" if self.good else "BAD"
        text = f"{label} [{self.component}] {self.description}"
        if not self.good:
            text += f" ({self.severity.value}): {self.recommendation}"
            if self.conversion_impact:
                text += f" Impact: {self.conversion_impact}"
        return text


NAVIGATION_PATTERNS = UIPattern(
    component="Navigation",
    category="Information Architecture",
    triggers=("<nav", 'role="navigation"'),
    heuristics=(Heuristic.CONSISTENCY, Heuristic.RECOGNITION),
    good_patterns=(
        Pattern(
            description="Clear navigation landmark with a recognizable label",
            indicators=('aria-label="main', 'aria-label="primary', "<nav"),
            severity=Severity.HIGH,
            recommendation="Navigation follows common conventions",
        ),
        Pattern(
            description="Breadcrumbs for deep navigation",
            indicators=('aria-label="breadcrumb', 'class="breadcrumb'),
            severity=Severity.MEDIUM,
            recommendation="Breadcrumbs present for wayfinding",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="Hover-only dropdown menus",
            indicators=("onmouseover", "mega-menu", "megamenu"),
            severity=Severity.HIGH,
            recommendation=(
                "Replace hover-only mega-menus with click-to-open dropdowns; "
                "hover menus open by accident and cause navigation fatigue"
            ),
            conversion_impact="Lower task completion",
        ),
    ),
)

FORM_PATTERNS = UIPattern(
    component="Forms",
    category="Input & Validation",
    triggers=("<form", "<input", "<textarea", "<select"),
    heuristics=(Heuristic.ERROR_PREVENTION, Heuristic.ERROR_RECOVERY, Heuristic.RECOGNITION),
    good_patterns=(
        Pattern(
            description="Inline validation signals",
            indicators=('type="email"', "pattern=", "aria-invalid", "aria-live"),
            severity=Severity.HIGH,
            recommendation="Form validates input as users type",
        ),
        Pattern(
            description="Placeholders showing format examples",
            indicators=('placeholder="mm/dd', 'placeholder="dd/mm', "@example.com"),
            severity=Severity.MEDIUM,
            recommendation="Format examples reduce memory load",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="Validation only on submit",
            indicators=("pattern=", "aria-invalid", "oninput", "onblur", "required", "minlength"),
            severity=Severity.HIGH,
            recommendation=(
                "Add inline validation that shows errors while typing; waiting "
                "until submit increases form abandonment"
            ),
            conversion_impact="0.5-2% reduction in form completion",
            when_absent=True,
        ),
        Pattern(
            description="No distinction between required and optional fields",
            indicators=("required", "aria-required", "*"),
            severity=Severity.MEDIUM,
            recommendation="Mark required fields with an asterisk or a 'required' label",
            conversion_impact="Up to 90% mobile abandonment",
            when_absent=True,
        ),
    ),
)

BUTTON_PATTERNS = UIPattern(
    component="Buttons",
    category="Interactive Elements",
    triggers=("<button", 'role="button"', 'type="submit"'),
    heuristics=(Heuristic.VISIBILITY, Heuristic.CONSISTENCY),
    good_patterns=(
        Pattern(
            description="Visible hover, focus and active states",
            indicators=(":hover", ":focus", ":active", "cursor: pointer", "cursor:pointer"),
            severity=Severity.HIGH,
            recommendation="Buttons have interactive states",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="No hover or focus states declared",
            indicators=(":hover", ":focus", "hover:", "focus:"),
            severity=Severity.HIGH,
            recommendation="Add visible hover, focus and active states to all buttons",
            when_absent=True,
        ),
    ),
)

ERROR_PATTERNS = UIPattern(
    component="Error Messages",
    category="Feedback",
    triggers=("error", "invalid", 'role="alert"'),
    heuristics=(Heuristic.ERROR_RECOVERY, Heuristic.MATCH_REAL_WORLD),
    good_patterns=(
        Pattern(
            description="Errors announced next to the field",
            indicators=('role="alert"', "aria-describedby", "aria-errormessage"),
            severity=Severity.HIGH,
            recommendation="Error messages are tied to their fields",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="Generic or technical error messages",
            indicators=("error 404", "error 500", "invalid input", "error occurred", "something went wrong"),
            severity=Severity.HIGH,
            recommendation=(
                "Replace generic errors with specific messages that name the "
                "field and the fix"
            ),
            conversion_impact="Higher form abandonment",
        ),
    ),
)

LOADING_PATTERNS = UIPattern(
    component="Loading Indicators",
    category="System Feedback",
    triggers=("<form", "<button", "fetch(", "async"),
    heuristics=(Heuristic.VISIBILITY,),
    good_patterns=(
        Pattern(
            description="Loading indicators with progress feedback",
            indicators=("spinner", "<progress", 'role="progressbar"', "loading...", "aria-busy"),
            severity=Severity.HIGH,
            recommendation="Loading states give clear feedback",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="No loading feedback on actions",
            indicators=("spinner", "<progress", "progressbar", "loading", "aria-busy", "skeleton"),
            severity=Severity.HIGH,
            recommendation=(
                "Show a loading state during async actions and disable the "
                "button to prevent double submission"
            ),
            when_absent=True,
        ),
    ),
)

MODAL_PATTERNS = UIPattern(
    component="Modals & Dialogs",
    category="Overlays",
    triggers=("<dialog", 'role="dialog"', 'aria-modal="true"', "modal"),
    heuristics=(Heuristic.USER_CONTROL, Heuristic.ERROR_PREVENTION),
    good_patterns=(
        Pattern(
            description="Dialog offers a visible close control",
            indicators=("×", "&times;", 'aria-label="close', "data-dismiss", "btn-close"),
            severity=Severity.HIGH,
            recommendation="Modal has an exit mechanism",
        ),
    ),
    bad_patterns=(
        Pattern(
            description="Modal without a close control",
            indicators=("×", "&times;", "close", "dismiss", "cancel"),
            severity=Severity.HIGH,
            recommendation="Add a close button, an Escape handler and click-outside dismissal",
            conversion_impact="Users abandon the task",
            when_absent=True,
        ),
    ),
)


UI_PATTERN_DATABASE: List[UIPattern] = [
    NAVIGATION_PATTERNS,
    FORM_PATTERNS,
    BUTTON_PATTERNS,
    ERROR_PATTERNS,
    LOADING_PATTERNS,
    MODAL_PATTERNS,
]


def patterns_for(heuristic: Optional[Heuristic] = None) -> List[UIPattern]:
    """Return the component patterns linked to a heuristic (all when None)."""
    return [
        ui_pattern for ui_pattern in UI_PATTERN_DATABASE
        if heuristic is None or heuristic in ui_pattern.heuristics
    ]


def pattern_present(html_lower: str, pattern: Pattern) -> bool:
    """Check a pattern against lower-cased markup."""
    found = any(indicator.lower() in html_lower for indicator in pattern.indicators)
    return not found if pattern.when_absent else found


def detect_patterns(html: str, heuristic: Optional[Heuristic] = None) -> List[PatternMatch]:
    """
    Detect good and bad UI patterns in markup.

    A component's patterns are only checked when one of its triggers
    appears in the page.

    Args:
        html: Page markup
        heuristic: Restrict to components linked to this heuristic

    Returns:
        Matches in database order, good patterns before bad ones
    """
    html_lower = (html or "").lower()
    if not html_lower:
        return []

    matches = []
    for ui_pattern in patterns_for(heuristic):
        if not any(trigger.lower() in html_lower for trigger in ui_pattern.triggers):
            continue
        for good, group in ((True, ui_pattern.good_patterns), (False, ui_pattern.bad_patterns)):
            for pattern in group:
                if pattern_present(html_lower, pattern):
                    matches.append(PatternMatch(
                        component=ui_pattern.component,
                        description=pattern.description,
                        good=good,
                        severity=pattern.severity,
                        recommendation=pattern.recommendation,
                        conversion_impact=pattern.conversion_impact,
                    ))
    return matches
