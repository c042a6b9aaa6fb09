from .solver import (
    AlignmentError,
    Placement,
    RelaxationResult,
    Solution,
    SolveOptions,
    get_solve_options,
    relax,
    set_solve_options,
    solve,
    step,
)
from .constraints import Constraint, ConstraintError, ConstraintGraph, ConstraintSet
from .orientation import CanonicalResult, align_to_reference, canonicalize, flatness
from .registry import SolutionRegistry, is_duplicate
from .quality import residual_breakdown, score_placement
from .search import SearchLoop, SearchOptions, SearchReport, search
from .rules_file import load_rules, save_rules
from .printer import ConsoleReporter, format_progress, format_solution

__all__ = [
    'AlignmentError',
    'CanonicalResult',
    'ConsoleReporter',
    'Constraint',
    'ConstraintError',
    'ConstraintGraph',
    'ConstraintSet',
    'Placement',
    'RelaxationResult',
    'SearchLoop',
    'SearchOptions',
    'SearchReport',
    'Solution',
    'SolutionRegistry',
    'SolveOptions',
    'align_to_reference',
    'canonicalize',
    'flatness',
    'format_progress',
    'format_solution',
    'get_solve_options',
    'is_duplicate',
    'load_rules',
    'relax',
    'residual_breakdown',
    'save_rules',
    'score_placement',
    'search',
    'set_solve_options',
    'solve',
    'step',
]
