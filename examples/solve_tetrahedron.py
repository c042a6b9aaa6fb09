"""Example pipeline: search for arrangements of a rigid four-planet cluster."""

from planet_atlas import ConstraintSet, SearchOptions, SolveOptions, format_solution, search, set_solve_options

RULES = [
    ("Earth", "Mars", 1.2),
    ("Earth", "Venus", 1.04),
    ("Earth", "Jupiter", 1.03),
    ("Mars", "Venus", 1.35),
    ("Mars", "Jupiter", 1.1),
    ("Venus", "Jupiter", 1.0),
]


def main() -> None:
    set_solve_options(SolveOptions(polish=True))
    rules = ConstraintSet.from_records(RULES)
    report = search(rules, SearchOptions(seed=123, max_attempts=5))
    print("Stop reason:", report.stop_reason)
    print("Duplicates:", report.duplicates)
    for solution in report.solutions:
        print(format_solution(solution.sequence, solution.quality, solution.placement))


if __name__ == "__main__":
    main()
