"""
Per-heuristic evaluator.

Each heuristic gets its own narrow model call combining the visual
decomposition, structural findings and page content. Responses are
validated against the evaluation schema; anything malformed fails the
whole call and that heuristic is dropped for the run.
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple

from ..exceptions import ModelCallError, UnknownHeuristicError
from ..utils.constants import (
    DEFAULT_TEXT_MODEL,
    HTML_CONTEXT_CHARS,
    MARKDOWN_CONTEXT_CHARS,
    STRUCTURAL_CONTEXT_CHARS,
    VISUAL_CONTEXT_CHARS,
)
from ..utils.log import get_logger
from .heuristics import BoundingBox, Heuristic, HeuristicStrength, HeuristicViolation, Severity
from .patterns import detect_patterns
from .prompts import build_heuristic_instruction
from .schemas import EvaluationPayload, parse_payload
from .structural import StructuralFindings
from .visual import VisualDecomposition


@dataclass(frozen=True)
class HeuristicEvaluation:
    """Outcome of one heuristic's evaluation call."""
    heuristic: Heuristic
    violations: Tuple[HeuristicViolation, ...] = ()
    strengths: Tuple[HeuristicStrength, ...] = ()
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, heuristic: Heuristic, error: str) -> "HeuristicEvaluation":
        return cls(heuristic=heuristic, error=error)


def _trim(text: str, limit: int) -> str:
    return text[:limit]


class HeuristicEvaluator:
    """
    Evaluates a page against one heuristic at a time.

    Stateless apart from the client, so one instance is shared by every
    concurrent call in a run.
    """

    def __init__(self, client, model: str = DEFAULT_TEXT_MODEL):
        """
        Initialize the evaluator.

        Args:
            client: Object with an async complete_json(instruction, image, model=...)
            model: Model name used for evaluation calls
        """
        self.client = client
        self.model = model
        self.logger = get_logger("evaluator")

    def build_context(
        self,
        heuristic: Heuristic,
        visual: VisualDecomposition,
        structural: StructuralFindings,
        page
    ) -> str:
        """
        Assemble the evidence block for one heuristic.

        Args:
            heuristic: Heuristic being evaluated
            visual: Stage 1 output (possibly failed)
            structural: Stage 2 output
            page: CapturedPage

        Returns:
            Context text with each source trimmed to its limit
        """
        title = page.metadata.get("title", "") if page.metadata else ""
        sections = [f"PAGE: {page.url}" + (f"\nTITLE: {title}" if title else "")]

        if visual.failed:
            sections.append(
                "VISUAL DECOMPOSITION: unavailable. Base visual claims on the "
                "attached screenshot only."
            )
        else:
            sections.append(
                "VISUAL DECOMPOSITION:\n"
                + _trim(json.dumps(visual.to_dict(), ensure_ascii=False), VISUAL_CONTEXT_CHARS)
            )

        sections.append(
            "STRUCTURAL FINDINGS:\n"
            + _trim(json.dumps(structural.to_dict(), ensure_ascii=False), STRUCTURAL_CONTEXT_CHARS)
        )

        if page.markdown:
            sections.append("PAGE CONTENT:\n" + _trim(page.markdown, MARKDOWN_CONTEXT_CHARS))
        if page.html:
            sections.append("HTML EXCERPT:\n" + _trim(page.html, HTML_CONTEXT_CHARS))

        matches = detect_patterns(page.html, heuristic)
        if matches:
            sections.append(
                "UI PATTERN SIGNALS:\n" + "\n".join(f"- {m.describe()}" for m in matches)
            )

        return "\n\n".join(sections)

    async def evaluate(
        self,
        heuristic: Heuristic,
        visual: VisualDecomposition,
        structural: StructuralFindings,
        page
    ) -> HeuristicEvaluation:
        """
        Evaluate one heuristic.

        Never raises for model problems: transport errors, schema errors
        and a mismatched heuristic all return a failed evaluation.

        Args:
            heuristic: Heuristic to evaluate
            visual: Stage 1 output
            structural: Stage 2 output
            page: CapturedPage

        Returns:
            HeuristicEvaluation with violations and strengths, or an error
        """
        instruction = build_heuristic_instruction(
            heuristic, self.build_context(heuristic, visual, structural, page)
        )
        self.logger.debug(f"Evaluating {heuristic.display_name}")

        try:
            data = await self.client.complete_json(instruction, page.screenshot, model=self.model)
        except ModelCallError as e:
            return self._failed(heuristic, str(e))

        result = parse_payload(EvaluationPayload, data)
        if not result.ok:
            return self._failed(heuristic, result.error)

        payload = result.value
        for item in list(payload.violations) + list(payload.strengths):
            if item.heuristic is None:
                continue
            try:
                named = Heuristic.parse(item.heuristic)
            except UnknownHeuristicError as e:
                return self._failed(heuristic, f"Response names an unknown heuristic: {e}")
            if named is not heuristic:
                return self._failed(
                    heuristic, f"Response names {named.id} while evaluating {heuristic.id}"
                )

        violations = tuple(
            HeuristicViolation(
                heuristic=heuristic,
                severity=Severity(v.severity),
                title=v.title,
                description=v.description,
                location=v.location,
                recommendation=v.recommendation,
                page_element=v.page_element,
                research_backing=v.research_backing,
                user_impact=v.user_impact,
                bounding_box=BoundingBox(
                    v.bounding_box.x, v.bounding_box.y,
                    v.bounding_box.width, v.bounding_box.height
                ) if v.bounding_box else None,
            )
            for v in payload.violations
        )
        strengths = tuple(
            HeuristicStrength(heuristic=heuristic, description=s.description, example=s.example)
            for s in payload.strengths
        )

        self.logger.debug(
            f"{heuristic.display_name}: {len(violations)} violations, {len(strengths)} strengths"
        )
        return HeuristicEvaluation(heuristic, violations, strengths)

    def _failed(self, heuristic: Heuristic, error: str) -> HeuristicEvaluation:
        self.logger.warning(f"Evaluation of {heuristic.display_name} failed: {error}")
        return HeuristicEvaluation.failure(heuristic, error)
