"""Pydantic schemas for model responses.

Every model call's JSON is validated here before it becomes a domain
object. ``parse_payload`` returns a tagged ``ParseResult`` instead of
raising, so callers branch on ``ok`` rather than trusting the raw shape.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Generic, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError, field_validator

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Percent = Annotated[float, Field(ge=0, le=100)]

M = TypeVar("M", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BoundingBoxPayload(_Payload):
    x: Percent
    y: Percent
    width: Percent
    height: Percent


class VisualPropertiesPayload(_Payload):
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    contrast: Optional[float] = None

    @field_validator("font_size", mode="before")
    @classmethod
    def stringify_font_size(cls, value: object) -> Optional[str]:
        if value is None:
            return None
        return str(value)


class InteractionStatePayload(_Payload):
    has_hover_state: bool = Field(default=False, alias="hasHoverState")
    has_focus_state: bool = Field(default=False, alias="hasFocusState")
    is_clickable: bool = Field(default=False, alias="isClickable")


class VisualElementPayload(_Payload):
    type: RequiredText
    text: Optional[str] = None
    bounding_box: BoundingBoxPayload = Field(alias="boundingBox")
    visual_properties: VisualPropertiesPayload = Field(
        default_factory=VisualPropertiesPayload, alias="visualProperties"
    )
    interaction_state: Optional[InteractionStatePayload] = Field(default=None, alias="interactionState")


class VisualHierarchyPayload(_Payload):
    header: List[VisualElementPayload] = Field(default_factory=list)
    navigation: List[VisualElementPayload] = Field(default_factory=list)
    main_content: List[VisualElementPayload] = Field(default_factory=list, alias="mainContent")
    footer: List[VisualElementPayload] = Field(default_factory=list)
    modals: List[VisualElementPayload] = Field(default_factory=list)


class ColorPalettePayload(_Payload):
    primary: List[str] = Field(default_factory=list)
    secondary: List[str] = Field(default_factory=list)
    text: List[str] = Field(default_factory=list)
    background: List[str] = Field(default_factory=list)


class ContrastIssuePayload(_Payload):
    element: RequiredText
    foreground: RequiredText
    background: RequiredText
    ratio: float = Field(ge=1, le=21)
    wcag_level: Optional[str] = Field(default=None, alias="wcagLevel")


class DecompositionPayload(_Payload):
    """Shape the vision model must return for a visual decomposition."""
    elements: List[VisualElementPayload]
    visual_hierarchy: VisualHierarchyPayload = Field(
        default_factory=VisualHierarchyPayload, alias="visualHierarchy"
    )
    color_palette: ColorPalettePayload = Field(default_factory=ColorPalettePayload, alias="colorPalette")
    contrast_issues: List[ContrastIssuePayload] = Field(default_factory=list, alias="contrastIssues")


class ViolationPayload(_Payload):
    heuristic: Optional[Union[str, int]] = None
    severity: Literal["high", "medium", "low"]
    title: RequiredText
    description: RequiredText
    location: RequiredText
    recommendation: RequiredText
    page_element: RequiredText = Field(alias="pageElement")
    bounding_box: Optional[BoundingBoxPayload] = Field(default=None, alias="boundingBox")
    research_backing: RequiredText = Field(alias="researchBacking")
    user_impact: RequiredText = Field(alias="userImpact")

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class StrengthPayload(_Payload):
    heuristic: Optional[Union[str, int]] = None
    description: RequiredText
    example: str = ""


class EvaluationPayload(_Payload):
    """Shape a per-heuristic evaluation must return."""
    violations: List[ViolationPayload] = Field(default_factory=list)
    strengths: List[StrengthPayload] = Field(default_factory=list)


@dataclass(frozen=True)
class ParseResult(Generic[M]):
    """Tagged outcome of validating a model response."""
    value: Optional[M] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: M) -> "ParseResult[M]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[M]":
        return cls(error=error)


def parse_payload(schema: Type[M], data: Any) -> ParseResult[M]:
    """
    Validate decoded JSON against a schema.

    Args:
        schema: Pydantic model class
        data: Decoded JSON value

    Returns:
        ParseResult holding the model instance or a readable error
    """
    if not isinstance(data, dict):
        return ParseResult.failure(
            f"{schema.__name__}: expected a JSON object, got {type(data).__name__}"
        )
    try:
        return ParseResult.success(schema.model_validate(data))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()[:5]
        )
        return ParseResult.failure(f"{schema.__name__}: {problems}")
