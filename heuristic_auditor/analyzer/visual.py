"""
Visual decomposer for screenshot analysis.

Asks a vision model for an inventory of the visible UI elements, their
visual hierarchy, palette and contrast problems. A failed call degrades to
an empty decomposition flagged as failed instead of aborting the run.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import ModelCallError, SchemaValidationError
from ..utils.constants import DEFAULT_VISION_MODEL, VISUAL_HTML_EXCERPT_CHARS
from ..utils.images import ensure_image
from ..utils.log import get_logger
from ..utils.retry import RetryPolicy
from .contrast import AA_NORMAL_RATIO, contrast_ratio, parse_color, wcag_level
from .heuristics import BoundingBox
from .prompts import VISUAL_DECOMPOSITION_PROMPT
from .schemas import DecompositionPayload, VisualElementPayload, parse_payload

__all__ = [
    "VisualProperties",
    "InteractionState",
    "VisualElement",
    "VisualHierarchy",
    "ColorPalette",
    "ContrastIssue",
    "VisualDecomposition",
    "VisualDecomposer",
    "ensure_image",
]


@dataclass(frozen=True)
class VisualProperties:
    """Rendered appearance of an element."""
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    font_size: Optional[str] = None
    contrast: Optional[float] = None


@dataclass(frozen=True)
class InteractionState:
    """Interaction cues visible in the screenshot."""
    has_hover_state: bool = False
    has_focus_state: bool = False
    is_clickable: bool = False


@dataclass(frozen=True)
class VisualElement:
    """One UI element detected in the screenshot."""
    type: str
    bounding_box: BoundingBox
    text: Optional[str] = None
    visual_properties: VisualProperties = field(default_factory=VisualProperties)
    interaction_state: Optional[InteractionState] = None

    @classmethod
    def from_payload(cls, payload: VisualElementPayload) -> "VisualElement":
        box = payload.bounding_box
        props = payload.visual_properties
        state = payload.interaction_state
        return cls(
            type=payload.type,
            text=payload.text,
            bounding_box=BoundingBox(box.x, box.y, box.width, box.height),
            visual_properties=VisualProperties(
                background_color=props.background_color,
                text_color=props.text_color,
                font_size=props.font_size,
                contrast=props.contrast,
            ),
            interaction_state=InteractionState(
                has_hover_state=state.has_hover_state,
                has_focus_state=state.has_focus_state,
                is_clickable=state.is_clickable,
            ) if state else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        props = self.visual_properties
        data = {
            "type": self.type,
            "text": self.text,
            "boundingBox": self.bounding_box.to_dict(),
            "visualProperties": {
                "backgroundColor": props.background_color,
                "textColor": props.text_color,
                "fontSize": props.font_size,
                "contrast": props.contrast,
            },
        }
        if self.interaction_state:
            data["interactionState"] = {
                "hasHoverState": self.interaction_state.has_hover_state,
                "hasFocusState": self.interaction_state.has_focus_state,
                "isClickable": self.interaction_state.is_clickable,
            }
        return data


@dataclass(frozen=True)
class VisualHierarchy:
    """Elements grouped into the five page zones."""
    header: Tuple[VisualElement, ...] = ()
    navigation: Tuple[VisualElement, ...] = ()
    main_content: Tuple[VisualElement, ...] = ()
    footer: Tuple[VisualElement, ...] = ()
    modals: Tuple[VisualElement, ...] = ()

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "header": [e.to_dict() for e in self.header],
            "navigation": [e.to_dict() for e in self.navigation],
            "mainContent": [e.to_dict() for e in self.main_content],
            "footer": [e.to_dict() for e in self.footer],
            "modals": [e.to_dict() for e in self.modals],
        }


@dataclass(frozen=True)
class ColorPalette:
    primary: Tuple[str, ...] = ()
    secondary: Tuple[str, ...] = ()
    text: Tuple[str, ...] = ()
    background: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "primary": list(self.primary),
            "secondary": list(self.secondary),
            "text": list(self.text),
            "background": list(self.background),
        }


@dataclass(frozen=True)
class ContrastIssue:
    """A text/background pair under the WCAG AA ratio."""
    element: str
    foreground: str
    background: str
    ratio: float
    wcag_level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element": self.element,
            "foreground": self.foreground,
            "background": self.background,
            "ratio": self.ratio,
            "wcagLevel": self.wcag_level,
        }


@dataclass(frozen=True)
class VisualDecomposition:
    """Element inventory extracted from a screenshot."""
    elements: Tuple[VisualElement, ...] = ()
    visual_hierarchy: VisualHierarchy = field(default_factory=VisualHierarchy)
    color_palette: ColorPalette = field(default_factory=ColorPalette)
    contrast_issues: Tuple[ContrastIssue, ...] = ()
    failed: bool = False

    @classmethod
    def empty(cls, failed: bool = True) -> "VisualDecomposition":
        """Decomposition carrying no visual evidence."""
        return cls(failed=failed)

    @property
    def has_evidence(self) -> bool:
        return not self.failed and len(self.elements) > 0

    @classmethod
    def from_payload(cls, payload: DecompositionPayload) -> "VisualDecomposition":
        hierarchy = payload.visual_hierarchy
        palette = payload.color_palette

        def convert(items):
            return tuple(VisualElement.from_payload(item) for item in items)

        return cls(
            elements=convert(payload.elements),
            visual_hierarchy=VisualHierarchy(
                header=convert(hierarchy.header),
                navigation=convert(hierarchy.navigation),
                main_content=convert(hierarchy.main_content),
                footer=convert(hierarchy.footer),
                modals=convert(hierarchy.modals),
            ),
            color_palette=ColorPalette(
                primary=tuple(palette.primary),
                secondary=tuple(palette.secondary),
                text=tuple(palette.text),
                background=tuple(palette.background),
            ),
            contrast_issues=tuple(
                ContrastIssue(
                    element=issue.element,
                    foreground=issue.foreground,
                    background=issue.background,
                    ratio=issue.ratio,
                    wcag_level=issue.wcag_level or wcag_level(issue.ratio),
                )
                for issue in payload.contrast_issues
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "elements": [e.to_dict() for e in self.elements],
            "visualHierarchy": self.visual_hierarchy.to_dict(),
            "colorPalette": self.color_palette.to_dict(),
            "contrastIssues": [c.to_dict() for c in self.contrast_issues],
            "failed": self.failed,
        }


def audit_contrast(decomposition: VisualDecomposition) -> Tuple[ContrastIssue, ...]:
    """
    Re-check contrast issues with the WCAG formula.

    Reported pairs whose colors parse are recomputed and dropped when they
    reach 4.5:1. Element text/background pairs under 4.5:1 are added.

    Args:
        decomposition: Decomposition as returned by the model

    Returns:
        Verified contrast issues
    """
    issues: List[ContrastIssue] = []
    seen = set()

    for issue in decomposition.contrast_issues:
        ratio = contrast_ratio(issue.foreground, issue.background)
        if ratio is None:
            # Unparsable colors: keep the model's estimate
            ratio = issue.ratio
        if ratio >= AA_NORMAL_RATIO:
            continue
        key = (parse_color(issue.foreground) or issue.foreground,
               parse_color(issue.background) or issue.background)
        seen.add(key)
        issues.append(ContrastIssue(
            element=issue.element,
            foreground=issue.foreground,
            background=issue.background,
            ratio=ratio,
            wcag_level=wcag_level(ratio),
        ))

    for element in decomposition.elements:
        props = element.visual_properties
        fg = parse_color(props.text_color)
        bg = parse_color(props.background_color)
        if fg is None or bg is None or (fg, bg) in seen:
            continue
        ratio = contrast_ratio(fg, bg)
        if ratio is not None and ratio < AA_NORMAL_RATIO:
            seen.add((fg, bg))
            issues.append(ContrastIssue(
                element=element.text or element.type,
                foreground=fg,
                background=bg,
                ratio=ratio,
                wcag_level=wcag_level(ratio),
            ))

    return tuple(issues)


class VisualDecomposer:
    """
    Extracts a UI element inventory from a screenshot.

    One vision model call per page, retried according to the injected
    RetryPolicy. Never raises for model problems.
    """

    def __init__(
        self,
        client,
        model: str = DEFAULT_VISION_MODEL,
        retry_policy: Optional[RetryPolicy] = None
    ):
        """
        Initialize the visual decomposer.

        Args:
            client: Object with an async complete_json(instruction, image, model=...)
            model: Vision model name
            retry_policy: Retry policy for the model call (default: 2 attempts, 1s delay)
        """
        self.client = client
        self.model = model
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=2, delay=1.0, retry_on=(ModelCallError, SchemaValidationError)
        )
        self.logger = get_logger("visual")

    async def decompose(self, screenshot, html: str = "") -> VisualDecomposition:
        """
        Decompose a screenshot into UI elements.

        Args:
            screenshot: Image bytes, base64 text or data URL
            html: Page markup; an excerpt is sent as context

        Returns:
            VisualDecomposition, with failed=True when every attempt failed

        Raises:
            InvalidScreenshotError: If the screenshot payload is unusable
        """
        image = ensure_image(screenshot)
        instruction = self._build_instruction(html)
        self.logger.info("Stage 1: decomposing screenshot")

        async def attempt() -> VisualDecomposition:
            data = await self.client.complete_json(instruction, image, model=self.model)
            result = parse_payload(DecompositionPayload, data)
            if not result.ok:
                raise SchemaValidationError(result.error)
            return VisualDecomposition.from_payload(result.value)

        try:
            decomposition = await self.retry_policy.run(attempt, "Visual decomposition")
        except (ModelCallError, SchemaValidationError) as e:
            self.logger.warning(f"Visual decomposition failed, continuing without visual evidence: {e}")
            return VisualDecomposition.empty(failed=True)
        except Exception as e:
            self.logger.error(f"Unexpected visual decomposition error, continuing without visual evidence: {e}")
            return VisualDecomposition.empty(failed=True)

        decomposition = VisualDecomposition(
            elements=decomposition.elements,
            visual_hierarchy=decomposition.visual_hierarchy,
            color_palette=decomposition.color_palette,
            contrast_issues=audit_contrast(decomposition),
        )
        self.logger.info(
            f"Stage 1 complete: {len(decomposition.elements)} elements, "
            f"{len(decomposition.contrast_issues)} contrast issues"
        )
        return decomposition

    def _build_instruction(self, html: str) -> str:
        excerpt = (html or "")[:VISUAL_HTML_EXCERPT_CHARS]
        if not excerpt:
            return VISUAL_DECOMPOSITION_PROMPT
        return f"{VISUAL_DECOMPOSITION_PROMPT}\n\nHTML EXCERPT FOR CONTEXT:\n{excerpt}"
