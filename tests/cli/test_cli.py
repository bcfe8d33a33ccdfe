import json
import logging
import runpy
from pathlib import Path

import pytest

from routeform import cli

SCENARIO = """
network:
  nodes: [A, B, C]
  links:
    - {source: A, target: B, capacity: 2}
    - {source: B, target: C, capacity: 2}
    - {source: A, target: C, capacity: 1}
demands:
  - {source: A, target: C, volume: 3}
"""


def extract_json_from_stdout(output: str) -> str:
    """Return the first balanced JSON object printed to stdout."""
    json_start = output.find("{")
    if json_start == -1:
        return output

    depth = 0
    for i in range(json_start, len(output)):
        if output[i] == "{":
            depth += 1
        elif output[i] == "}":
            depth -= 1
            if depth == 0:
                return output[json_start : i + 1]
    return output


@pytest.fixture
def scenario_file(tmp_path: Path) -> Path:
    path = tmp_path / "triangle.yaml"
    path.write_text(SCENARIO)
    return path


def test_run_prints_report_and_table(scenario_file: Path, capsys) -> None:
    cli.main(["run", str(scenario_file), "--solver", "highs"])
    out = capsys.readouterr().out

    assert "Ok! Total number of wavelengths used in the links: 5" in out
    assert "Demand" in out and "Carried" in out
    assert "A|B|0 > B|C|1" in out


def test_run_writes_results_file(scenario_file: Path, tmp_path: Path) -> None:
    results_path = tmp_path / "out" / "res.json"
    cli.main(["run", str(scenario_file), "--results", str(results_path)])

    data = json.loads(results_path.read_text())
    assert data["scenario"] == str(scenario_file)
    assert data["total_cost"] == pytest.approx(5.0)
    assert len(data["allocations"]) == 2
    assert data["link_utilization"] == pytest.approx(
        {"A|B|0": 2.0, "B|C|1": 2.0, "A|C|2": 1.0}
    )


def test_run_stdout(scenario_file: Path, capsys) -> None:
    cli.main(["--quiet", "run", str(scenario_file), "--stdout", "--k", "2"])
    payload = json.loads(extract_json_from_stdout(capsys.readouterr().out))

    assert payload["total_cost"] == pytest.approx(5.0)
    assert [alloc["hops"] for alloc in payload["allocations"]] == [1, 2]
    assert [alloc["nodes"] for alloc in payload["allocations"]] == [
        ["A", "C"],
        ["A", "B", "C"],
    ]


def test_run_non_bifurcated(scenario_file: Path, capsys) -> None:
    scenario_file.write_text(SCENARIO.replace("volume: 3", "volume: 2"))
    cli.main(["run", str(scenario_file), "--non-bifurcated", "--stdout"])
    payload = json.loads(extract_json_from_stdout(capsys.readouterr().out))

    (alloc,) = payload["allocations"]
    assert alloc["links"] == ["A|B|0", "B|C|1"]
    assert alloc["carried"] == pytest.approx(2.0)
    assert payload["summary"].endswith(": 4")


def test_run_failure_exits_with_error(scenario_file: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(scenario_file), "--k", "1"])
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "ERROR: Failed to run scenario: OptimizationFailedError" in out


def test_run_invalid_scenario(tmp_path: Path, capsys) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("unknown: 1\n")
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(path)])
    assert exc.value.code == 1
    assert "ValueError" in capsys.readouterr().out


def test_run_missing_file(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(tmp_path / "missing.yaml")])
    assert exc.value.code == 1
    assert "ERROR: Scenario file not found" in capsys.readouterr().out


def test_no_arguments_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 0
    assert "usage: routeform" in capsys.readouterr().out


def test_unknown_solver_rejected(scenario_file: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["run", str(scenario_file), "--solver", "glpk"])
    assert exc.value.code == 2


@pytest.mark.parametrize(
    "flag, level",
    [("--verbose", logging.DEBUG), ("--quiet", logging.WARNING), (None, logging.INFO)],
)
def test_log_level_flags(scenario_file: Path, flag, level) -> None:
    argv = [flag] if flag else []
    cli.main(argv + ["run", str(scenario_file)])
    assert logging.getLogger("routeform").level == level


def test_module_entrypoint(scenario_file: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.argv", ["routeform", "run", str(scenario_file)])
    runpy.run_module("routeform", run_name="__main__")
    assert "Ok! Total number" in capsys.readouterr().out
