"""
Structural analyzer for deterministic markup inspection.

Inventories accessibility, forms, navigation, buttons and semantic markup
from HTML alone. No network calls; the same input always gives the same
findings, and malformed markup degrades to empty findings.
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from ..utils.log import get_logger


SEMANTIC_TAGS = ('header', 'nav', 'main', 'section', 'article', 'aside', 'footer')
GENERIC_CONTAINERS = ('div', 'span')

# Landmark role -> element that carries it implicitly
LANDMARK_ROLES = {
    'banner': 'header',
    'navigation': 'nav',
    'main': 'main',
    'complementary': 'aside',
    'contentinfo': 'footer',
}

SKIPPED_INPUT_TYPES = {'hidden', 'submit', 'button', 'reset', 'image'}
BUTTON_INPUT_TYPES = {'submit', 'button', 'reset'}
TYPED_VALIDATION_INPUTS = {'email', 'tel', 'url', 'number', 'date'}

INLINE_VALIDATION_PATTERN = re.compile(
    r'oninput|onblur|@input|@blur|aria-invalid|aria-live', re.I
)
MOBILE_MENU_PATTERN = re.compile(r'hamburger|menu-toggle|mobile-menu|navbar-toggler', re.I)
DROPDOWN_PATTERN = re.compile(r'dropdown|submenu|aria-haspopup', re.I)
SKIP_LINK_PATTERN = re.compile(r'skip to|skip-to-content|skip navigation|skip-link', re.I)
WORD_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9'’-]*")


@dataclass
class HeadingStructure:
    """Heading levels in document order and any skipped levels."""
    issues: List[str] = field(default_factory=list)
    hierarchy: List[int] = field(default_factory=list)


@dataclass
class LandmarkRoles:
    """Standard landmark roles found and missing."""
    present: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)


@dataclass
class AccessibilityFindings:
    """Accessibility inventory."""
    missing_alt_text: List[str] = field(default_factory=list)
    missing_aria_labels: List[str] = field(default_factory=list)
    missing_form_labels: List[str] = field(default_factory=list)
    heading_structure: HeadingStructure = field(default_factory=HeadingStructure)
    landmark_roles: LandmarkRoles = field(default_factory=LandmarkRoles)


@dataclass
class FormInput:
    """A user-editable form control."""
    id: str
    type: str
    has_label: bool = False
    has_placeholder: bool = False
    has_validation: bool = False
    is_required: bool = False


@dataclass
class ValidationPatterns:
    """Signals of inline and client-side validation."""
    inline_validation: bool = False
    client_side_validation: bool = False
    required_indicators: bool = False


@dataclass
class FormFindings:
    """Form inventory."""
    inputs: List[FormInput] = field(default_factory=list)
    validation_patterns: ValidationPatterns = field(default_factory=ValidationPatterns)


@dataclass
class PrimaryNav:
    """Summary of the first navigation region."""
    type: str = "none"
    items: int = 0
    has_dropdowns: bool = False
    is_mobile_responsive: bool = False


@dataclass
class NavigationFindings:
    """Navigation landmarks."""
    primary_nav: PrimaryNav = field(default_factory=PrimaryNav)
    breadcrumbs: bool = False
    skip_links: bool = False


@dataclass
class ButtonFindings:
    """Button inventory and accessible-name coverage."""
    total: int = 0
    with_accessible_name: int = 0
    with_aria_labels: int = 0
    with_disabled_state: int = 0
    types: List[str] = field(default_factory=list)


@dataclass
class SemanticFindings:
    """Semantic tag usage against generic containers."""
    uses_semantic_tags: bool = False
    semantic_tag_count: int = 0
    generic_container_count: int = 0
    div_soup_score: float = 0.0
    missing_landmarks: List[str] = field(default_factory=list)


@dataclass
class StructuralFindings:
    """Complete structural inventory of a page."""
    accessibility: AccessibilityFindings = field(default_factory=AccessibilityFindings)
    forms: FormFindings = field(default_factory=FormFindings)
    navigation: NavigationFindings = field(default_factory=NavigationFindings)
    buttons: ButtonFindings = field(default_factory=ButtonFindings)
    semantic_html: SemanticFindings = field(default_factory=SemanticFindings)
    content_word_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """camelCase JSON form, as sent to the evaluator model."""
        return _camelize(asdict(self))


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


class StructuralAnalyzer:
    """
    Deterministic structural analysis of page markup.

    Runs a fixed set of checks over the parsed document and never raises.
    """

    def __init__(self):
        """Initialize the structural analyzer."""
        self.logger = get_logger("structural")

    def analyze(self, html: str, markdown: str = "") -> StructuralFindings:
        """
        Analyze HTML content.

        Args:
            html: HTML content to analyze
            markdown: Text rendition of the page, used for the word count

        Returns:
            StructuralFindings for the page
        """
        self.logger.info("Stage 2: Starting structural analysis...")
        findings = StructuralFindings()
        findings.content_word_count = len(WORD_PATTERN.findall(markdown or ""))

        soup = self._parse(html)
        if soup is None:
            self._mark_all_landmarks_missing(findings)
            self.logger.info("Stage 2 complete: no parsable markup")
            return findings

        self._check_images(soup, findings)
        self._check_forms(soup, findings)
        self._check_validation(soup, findings)
        self._check_navigation(soup, findings)
        self._check_buttons(soup, findings)
        self._check_semantics(soup, findings)
        self._check_landmarks(soup, findings)
        self._check_headings(soup, findings)

        self.logger.info(
            f"Stage 2 complete: {len(findings.accessibility.missing_alt_text)} images without alt, "
            f"{len(findings.accessibility.missing_form_labels)} unlabeled inputs, "
            f"{findings.buttons.total} buttons, div-soup {findings.semantic_html.div_soup_score}"
        )
        return findings

    def _parse(self, html: str) -> Optional[BeautifulSoup]:
        """Parse markup, preferring lxml."""
        if not html or not isinstance(html, str) or not html.strip():
            return None
        try:
            return BeautifulSoup(html, 'lxml')
        except Exception:
            try:
                return BeautifulSoup(html, 'html.parser')
            except Exception as e:
                self.logger.debug(f"Markup could not be parsed: {e}")
                return None

    def _mark_all_landmarks_missing(self, findings: StructuralFindings) -> None:
        missing = list(LANDMARK_ROLES)
        findings.accessibility.landmark_roles.missing = missing
        findings.semantic_html.missing_landmarks = list(missing)

    def _check_images(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Check images for missing alternative text."""
        missing = [img for img in soup.find_all('img') if img.get('alt') is None]
        findings.accessibility.missing_alt_text = [
            f"Image {idx}: {self._excerpt(img)}"
            for idx, img in enumerate(missing, start=1)
        ]

    def _check_forms(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Inventory form controls and cross-reference their labels."""
        label_targets = {
            label.get('for') for label in soup.find_all('label')
            if label.get('for')
        }

        for position, control in enumerate(soup.find_all(['input', 'select', 'textarea']), start=1):
            if control.name == 'input':
                control_type = (control.get('type') or 'text').lower()
            else:
                control_type = control.name

            if control_type in SKIPPED_INPUT_TYPES:
                continue

            control_id = control.get('id') or ''
            has_label = bool(control_id and control_id in label_targets)
            if control.get('aria-label') or control.get('aria-labelledby'):
                has_label = True
            if control.find_parent('label') is not None:
                has_label = True

            entry = FormInput(
                id=control_id or f"unknown-{position}",
                type=control_type,
                has_label=has_label,
                has_placeholder=control.has_attr('placeholder'),
                has_validation=any(
                    control.has_attr(attr) for attr in ('pattern', 'minlength', 'maxlength', 'min', 'max')
                ),
                is_required=control.has_attr('required') or control.get('aria-required') == 'true',
            )
            findings.forms.inputs.append(entry)

            if not has_label:
                findings.accessibility.missing_form_labels.append(
                    f"Input #{entry.id} (type: {entry.type})"
                )

    def _check_validation(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Detect inline and client-side validation signals."""
        patterns = findings.forms.validation_patterns
        markup = str(soup)

        patterns.inline_validation = bool(INLINE_VALIDATION_PATTERN.search(markup))

        controls = soup.find_all(['input', 'select', 'textarea'])
        patterns.client_side_validation = any(
            control.has_attr(attr)
            for control in controls
            for attr in ('pattern', 'minlength', 'maxlength', 'required')
        ) or any(
            (control.get('type') or '').lower() in TYPED_VALIDATION_INPUTS
            for control in soup.find_all('input')
        )

        patterns.required_indicators = any(
            control.has_attr('required') or control.has_attr('aria-required')
            for control in controls
        ) or any('*' in label.get_text() for label in soup.find_all('label'))

    def _check_navigation(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Check breadcrumbs, skip links and the primary navigation."""
        navigation = findings.navigation

        navigation.breadcrumbs = bool(
            soup.find(attrs={'aria-label': re.compile(r'breadcrumb', re.I)})
            or soup.find(class_=re.compile(r'breadcrumb', re.I))
            or soup.find(id=re.compile(r'breadcrumb', re.I))
        )

        navigation.skip_links = any(
            (link.get('href') or '').startswith('#') and (
                SKIP_LINK_PATTERN.search(link.get_text(" ", strip=True))
                or SKIP_LINK_PATTERN.search(' '.join(link.get('class') or []))
            )
            for link in soup.find_all('a')[:10]
        )

        nav = soup.find('nav')
        nav_type = 'semantic'
        if nav is None:
            nav = soup.find(attrs={'role': 'navigation'})
            nav_type = 'role'
        if nav is None:
            return

        primary = navigation.primary_nav
        primary.type = nav_type
        primary.items = len(nav.find_all('a'))
        primary.has_dropdowns = bool(DROPDOWN_PATTERN.search(str(nav)))
        primary.is_mobile_responsive = bool(MOBILE_MENU_PATTERN.search(str(soup)))

    def _check_buttons(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Inventory buttons and their accessible names."""
        buttons = findings.buttons
        types = set()

        candidates: List[Tag] = []
        for elem in soup.find_all(True):
            if elem.name == 'button' or elem.get('role') == 'button':
                candidates.append(elem)
            elif elem.name == 'input' and (elem.get('type') or '').lower() in BUTTON_INPUT_TYPES:
                candidates.append(elem)

        for button in candidates:
            buttons.total += 1
            if button.name == 'input':
                types.add((button.get('type') or 'submit').lower())
            elif button.name == 'button':
                types.add((button.get('type') or 'submit').lower())
            else:
                types.add('role-button')

            aria = bool(button.get('aria-label') or button.get('aria-labelledby'))
            if aria:
                buttons.with_aria_labels += 1

            if self._has_accessible_name(button) or aria:
                buttons.with_accessible_name += 1
            else:
                findings.accessibility.missing_aria_labels.append(
                    f"Button without accessible name: {self._excerpt(button)}"
                )

            if button.has_attr('disabled') or button.get('aria-disabled') == 'true':
                buttons.with_disabled_state += 1

        # Icon-only links are part of the same accessible-name inventory
        for link in soup.find_all('a'):
            if link.get('role') == 'button':
                continue
            if not self._has_accessible_name(link) and not link.get('aria-label') and not link.get('aria-labelledby'):
                findings.accessibility.missing_aria_labels.append(
                    f"Link without accessible name: {self._excerpt(link)}"
                )

        buttons.types = sorted(types)

    def _has_accessible_name(self, elem: Tag) -> bool:
        """Whether an element has visible text or a naming attribute."""
        if elem.get_text(strip=True):
            return True
        if elem.get('title') or (elem.name == 'input' and elem.get('value')):
            return True
        img = elem.find('img')
        return bool(img is not None and img.get('alt'))

    def _check_semantics(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Compare semantic tag usage against generic containers."""
        semantic = findings.semantic_html
        semantic.semantic_tag_count = sum(len(soup.find_all(tag)) for tag in SEMANTIC_TAGS)
        semantic.generic_container_count = sum(len(soup.find_all(tag)) for tag in GENERIC_CONTAINERS)
        semantic.uses_semantic_tags = semantic.semantic_tag_count > 0

        if semantic.semantic_tag_count > 0:
            semantic.div_soup_score = round(
                semantic.generic_container_count / semantic.semantic_tag_count, 1
            )
        else:
            semantic.div_soup_score = float(semantic.generic_container_count)

    def _check_landmarks(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Check for the five standard landmark roles."""
        landmarks = findings.accessibility.landmark_roles
        for role, element in LANDMARK_ROLES.items():
            if soup.find(attrs={'role': role}) or soup.find(element):
                landmarks.present.append(role)
            else:
                landmarks.missing.append(role)
        findings.semantic_html.missing_landmarks = list(landmarks.missing)

    def _check_headings(self, soup: BeautifulSoup, findings: StructuralFindings) -> None:
        """Record heading levels and flag skips of more than one level."""
        structure = findings.accessibility.heading_structure
        levels = [
            int(h.name[1])
            for h in soup.find_all(re.compile(r'^h[1-6]$'))
        ]
        structure.hierarchy = levels

        for previous, current in zip(levels, levels[1:]):
            if current - previous > 1:
                structure.issues.append(
                    f"Heading level skipped: h{previous} to h{current}"
                )

    def _excerpt(self, elem: Tag, limit: int = 100) -> str:
        text = str(elem)
        return text if len(text) <= limit else text[:limit] + "..."


def analyze_structure(html: str, markdown: str = "") -> StructuralFindings:
    """Run the structural analyzer once over a page."""
    return StructuralAnalyzer().analyze(html, markdown)
