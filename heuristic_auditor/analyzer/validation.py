"""
Cross-validator for candidate violations.

Three deterministic passes, in order: exact-duplicate removal,
low-confidence filtering, near-duplicate merging. Strengths are not
touched. Rejections are counted and logged at DEBUG; they are expected
data-quality outcomes, not errors.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..utils.log import get_logger
from .heuristics import HeuristicViolation, Severity

HEDGING_PHRASES = (
    "could be improved",
    "might be better",
    "consider adding",
    "may want to",
    "should possibly",
    "generally",
    "overall",
    "in general",
    "would benefit from",
    "it is recommended",
)

NON_SPECIFIC_ELEMENTS = {"", "unknown", "general"}

MIN_TITLE_WORDS = 5

MIN_RESEARCH_BACKING_CHARS = 20

MIN_USER_IMPACT_CHARS = 10

SIMILARITY_THRESHOLD = 0.6

# Topics that belong to accessibility, SEO or code audits
TECHNICAL_PATTERNS = [
    re.compile(pattern, re.I) for pattern in (
        r"viewport", r"meta\s+(tag|name|description)", r"charset", r"doctype",
        r"html\s+lang", r"alt\s+(attribute|text)", r"aria-", r"role=", r"tabindex",
        r"screen\s+reader", r"\bwcag\b", r"semantic\s+html", r"heading\s+hierarchy",
        r"landmark\s+roles?", r"<(main|nav|header|footer|article|section)>",
        r"\bseo\b", r"open\s+graph", r"favicon", r"sitemap", r"robots\.txt",
        r"schema\.org", r"json-ld", r"structured\s+data", r"page\s+speed",
        r"load\s+time", r"minif", r"\bw3c\b", r"(html|css)\s+validation",
    )
]

TOKEN_SPLIT = re.compile(r"\s+")


@dataclass
class ValidationResult:
    """Outcome of cross-validation."""
    validated: List[HeuristicViolation] = field(default_factory=list)
    duplicates_removed: int = 0
    false_positives_removed: int = 0
    merged: int = 0


def title_tokens(title: str) -> set:
    return {token for token in TOKEN_SPLIT.split(title.lower()) if token}


def title_similarity(first: str, second: str) -> float:
    """Jaccard similarity of the lower-cased whitespace tokens of two titles."""
    a = title_tokens(first)
    b = title_tokens(second)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def is_similar(first: HeuristicViolation, second: HeuristicViolation) -> bool:
    """Same location or page element, and title similarity above the threshold."""
    same_place = (
        first.location.strip().lower() == second.location.strip().lower()
        or first.page_element.strip().lower() == second.page_element.strip().lower()
    )
    return same_place and title_similarity(first.title, second.title) > SIMILARITY_THRESHOLD


class CrossValidator:
    """
    Deduplicates and filters candidate violations.

    validate() is idempotent: feeding its output back in returns the same
    list.
    """

    def __init__(self, reject_technical: bool = False, require_evidence: bool = False):
        """
        Initialize the validator.

        Args:
            reject_technical: Also drop findings about markup, SEO or
                performance topics
            require_evidence: Also drop findings whose research backing or
                user impact is too short to be a real citation
        """
        self.reject_technical = reject_technical
        self.require_evidence = require_evidence
        self.logger = get_logger("validation")

    def validate(self, violations: Sequence[HeuristicViolation]) -> ValidationResult:
        """
        Run the three validation passes.

        Args:
            violations: Candidate violations in aggregation order

        Returns:
            ValidationResult with surviving violations and counters
        """
        self.logger.info(f"Stage 4: cross-validating {len(violations)} violations")

        unique = self.remove_duplicates(violations)
        confident = [v for v in unique if self.rejection_reason(v) is None]
        merged = self.merge_similar(confident)

        result = ValidationResult(
            validated=merged,
            duplicates_removed=len(violations) - len(unique),
            false_positives_removed=len(unique) - len(confident),
            merged=len(confident) - len(merged),
        )
        self.logger.info(
            f"Stage 4 complete: {len(result.validated)} validated, "
            f"{result.duplicates_removed} duplicates, "
            f"{result.false_positives_removed} false positives, {result.merged} merged"
        )
        return result

    def remove_duplicates(self, violations: Sequence[HeuristicViolation]) -> List[HeuristicViolation]:
        """Drop exact (title, location, page_element) repeats; first occurrence wins."""
        seen = set()
        unique = []
        for violation in violations:
            key = (violation.title, violation.location, violation.page_element)
            if key in seen:
                continue
            seen.add(key)
            unique.append(violation)
        return unique

    def rejection_reason(self, violation: HeuristicViolation) -> Optional[str]:
        """
        Explain why a violation is low-confidence.

        Returns:
            Reason text, or None when the violation is kept
        """
        text = " ".join((
            violation.title, violation.description, violation.location, violation.page_element
        )).lower()

        reason = None
        if self.reject_technical and any(p.search(text) for p in TECHNICAL_PATTERNS):
            reason = "technical topic"
        elif any(phrase in text for phrase in HEDGING_PHRASES):
            reason = "hedging language"
        elif len(violation.title.split()) < MIN_TITLE_WORDS:
            reason = "vague title"
        elif violation.page_element.strip().lower() in NON_SPECIFIC_ELEMENTS:
            reason = "non-specific element"
        elif violation.severity is Severity.HIGH and violation.bounding_box is None:
            reason = "high severity without bounding box"
        elif self.require_evidence and len(violation.research_backing.strip()) < MIN_RESEARCH_BACKING_CHARS:
            reason = "no research backing"
        elif self.require_evidence and len(violation.user_impact.strip()) < MIN_USER_IMPACT_CHARS:
            reason = "no user impact"

        if reason:
            self.logger.debug(f"Rejected ({reason}): {violation.title}")
        return reason

    def merge_similar(self, violations: Sequence[HeuristicViolation]) -> List[HeuristicViolation]:
        """
        Merge near-duplicates.

        Similar pairs are clustered transitively. Each cluster keeps its
        most severe member (earliest on ties) at the position of the
        cluster's first member.
        """
        parent = list(range(len(violations)))

        def find(i: int) -> int:
            while parent[i] != i:
                parent[i] = parent[parent[i]]
                i = parent[i]
            return i

        for i in range(len(violations)):
            for j in range(i + 1, len(violations)):
                if is_similar(violations[i], violations[j]):
                    root_i, root_j = find(i), find(j)
                    if root_i != root_j:
                        parent[max(root_i, root_j)] = min(root_i, root_j)

        clusters: Dict[int, List[int]] = {}
        for i in range(len(violations)):
            clusters.setdefault(find(i), []).append(i)

        merged = []
        for root in sorted(clusters):
            members = clusters[root]
            survivor = members[0]
            for index in members[1:]:
                if violations[index].severity.rank > violations[survivor].severity.rank:
                    survivor = index
            if len(members) > 1:
                self.logger.debug(
                    f"Merged {len(members)} similar violations into: {violations[survivor].title}"
                )
            merged.append(violations[survivor])
        return merged
