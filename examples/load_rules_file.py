"""Example pipeline: load rules.xml and stream solutions as they are found."""

from pathlib import Path

from planet_atlas import ConsoleReporter, SearchLoop, SearchOptions, load_rules

RULES_PATH = Path(__file__).with_name("rules.xml")


def main() -> None:
    rules = load_rules(RULES_PATH)
    reporter = ConsoleReporter()
    loop = SearchLoop(
        rules,
        SearchOptions(seed=7, max_seconds=10.0),
        on_solution=reporter.solution,
        on_progress=reporter.progress,
    )
    report = loop.run()
    reporter.finish()
    print(f"{len(report.solutions)} solution(s) in {report.attempts} attempt(s)")


if __name__ == "__main__":
    main()
