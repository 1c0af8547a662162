"""Free-text card search: tokenization, pattern recognition, retrieval and ranking."""

from .fuzzy import FuzzyEnhancer, expand_abbreviations, find_close_matches, generate_suggestions
from .patterns import recognize
from .planner import QueryPlanner, build_filters
from .ranking import rank
from .relaxation import RELAXATION_ORDER, RelaxationController, RelaxationOutcome
from .service import CATEGORIES, SearchService, create_search_service
from .tokenizer import TokenExtractor, resolve_collisions

__all__ = [
    "CATEGORIES",
    "RELAXATION_ORDER",
    "FuzzyEnhancer",
    "QueryPlanner",
    "RelaxationController",
    "RelaxationOutcome",
    "SearchService",
    "TokenExtractor",
    "build_filters",
    "create_search_service",
    "expand_abbreviations",
    "find_close_matches",
    "generate_suggestions",
    "rank",
    "recognize",
    "resolve_collisions",
]
