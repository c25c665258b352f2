"""
Analyzer module for heuristic evaluation.

Contains the heuristic catalogue, the five pipeline stages (visual
decomposition, structural analysis, per-heuristic evaluation,
cross-validation and scoring) and the pipeline that runs them.
"""

from .heuristics import (
    Heuristic,
    Severity,
    BoundingBox,
    HeuristicViolation,
    HeuristicStrength,
    ALL_HEURISTICS,
    parse_selection,
)
from .structural import StructuralAnalyzer, StructuralFindings, analyze_structure
from .visual import VisualDecomposer, VisualDecomposition, VisualElement
from .model_client import ModelClient
from .evaluator import HeuristicEvaluator, HeuristicEvaluation
from .orchestrator import EvaluationOrchestrator, OrchestrationResult
from .validation import CrossValidator, ValidationResult
from .scoring import Scorer, ScoringContext, ScoringResult
from .patterns import detect_patterns, PatternMatch
from .pipeline import HeuristicPipeline, PipelineResult, evaluate

__all__ = [
    # Pipeline
    "HeuristicPipeline",
    "PipelineResult",
    "evaluate",
    # Catalogue
    "Heuristic",
    "Severity",
    "BoundingBox",
    "HeuristicViolation",
    "HeuristicStrength",
    "ALL_HEURISTICS",
    "parse_selection",
    # Stage 1
    "VisualDecomposer",
    "VisualDecomposition",
    "VisualElement",
    # Stage 2
    "StructuralAnalyzer",
    "StructuralFindings",
    "analyze_structure",
    # Stage 3
    "ModelClient",
    "HeuristicEvaluator",
    "HeuristicEvaluation",
    "EvaluationOrchestrator",
    "OrchestrationResult",
    "detect_patterns",
    "PatternMatch",
    # Stage 4
    "CrossValidator",
    "ValidationResult",
    # Stage 5
    "Scorer",
    "ScoringContext",
    "ScoringResult",
]
