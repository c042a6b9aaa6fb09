import pytest

import planet_atlas.__main__ as cli
from planet_atlas.search import SearchReport

TRIANGLE_XML = """<?xml version="1.0"?>
<ArrayOfBindRule>
  <BindRule PlanetOne="A" PlanetTwo="B" Distance="1" />
  <BindRule PlanetOne="B" PlanetTwo="C" Distance="1" />
  <BindRule PlanetOne="C" PlanetTwo="A" Distance="1" />
</ArrayOfBindRule>
"""


def _write_rules(tmp_path, text=TRIANGLE_XML, name="rules.xml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_main_prints_solutions_and_summary(tmp_path, capsys):
    path = _write_rules(tmp_path)

    cli.main([str(path), "--seed", "1", "--max-attempts", "2", "--no-progress"])

    out = capsys.readouterr().out
    assert "Solution Number: 1\nSolution Quality: 0.00\n\nPlanet,x,y,z\nA,0.00,0.00,0.00\n" in out
    assert "Solution Number: 2" not in out
    assert out.rstrip().endswith("Stopped (max_attempts): 2 attempt(s), 1 solution(s), 1 duplicate(s)")


def test_main_passes_search_policy(tmp_path, monkeypatch, capsys):
    path = _write_rules(tmp_path)
    captured = {}

    class _Loop:
        def __init__(self, rules, options, *, on_solution, on_progress):
            captured["planets"] = rules.planets
            captured["options"] = options
            self.registry = []
            self.report = SearchReport()

        def run(self):
            self.report.stop_reason = "max_seconds"
            return self.report

    monkeypatch.setattr(cli, "SearchLoop", _Loop)

    cli.main([str(path), "--seed", "7", "--max-seconds", "0.5", "--max-solutions", "3", "--polish"])

    options = captured["options"]
    assert captured["planets"] == ("A", "B", "C")
    assert (options.seed, options.max_seconds, options.max_solutions) == (7, 0.5, 3)
    assert options.max_attempts is None
    assert options.solve.polish is True
    assert "Stopped (max_seconds): 0 attempt(s), 0 solution(s), 0 duplicate(s)" in capsys.readouterr().out


def test_main_reports_interrupt(tmp_path, monkeypatch, capsys):
    path = _write_rules(tmp_path)

    class _Loop:
        def __init__(self, rules, options, *, on_solution, on_progress):
            self.registry = []
            self.report = SearchReport(attempts=4)

        def run(self):
            raise KeyboardInterrupt

    monkeypatch.setattr(cli, "SearchLoop", _Loop)

    cli.main([str(path)])

    assert "Stopped (interrupted): 4 attempt(s)" in capsys.readouterr().out


def test_main_exits_for_missing_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "absent.xml")])

    assert excinfo.value.code == 1


def test_main_exits_when_rules_name_two_planets(tmp_path):
    path = _write_rules(tmp_path, "A,B,1\n", name="rules.txt")

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path)])

    assert excinfo.value.code == 1
