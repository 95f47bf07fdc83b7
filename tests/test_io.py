# tests/test_io.py
"""
Job files in, CSV / report files out, and the command line.
"""

import json

import numpy as np
import pandas as pd
import pytest

from fea3d import ConfigError, ExportError, Options, Summary, solve
from fea3d.cli import main
from fea3d.io import load_job_file, save_summary, write_csv, write_report
from fea3d.summary import DISPLACEMENT_COLUMNS, ELEMENT_FORCE_COLUMNS

L = 3.0
EIZ = 1.68e6
P = 1000.0


def write_cantilever_job(tmp_path, **overrides):
    """Cantilever along x, tip load -P in y; tables inline except nodes/props (CSV)."""
    (tmp_path / "nodes.csv").write_text(f"0,0,0\n{L},0,0\n")
    (tmp_path / "props.csv").write_text(f"2.1e9,{EIZ},8.4e5,8.1e5,0,1,0\n")

    job = {
        "nodes": "nodes.csv",
        "elems": [[0, 1]],
        "props": "props.csv",
        "bcs": [[0, dof, 0.0] for dof in range(6)],
        "forces": [[1, 1, -P]],
    }
    job.update(overrides)

    path = tmp_path / "job.json"
    path.write_text(json.dumps(job))
    return path


class TestExport:

    def test_write_csv_precision_and_delimiter(self, tmp_path):
        path = write_csv(tmp_path / "t.csv", [[1 / 3, 2.0], [-1.5e-7, 0.0]], precision=4, delimiter=";")

        assert path.read_text().splitlines() == ["0.3333;2", "-1.5e-07;0"]

    def test_default_precision_keeps_14_digits(self, tmp_path):
        path = write_csv(tmp_path / "t.csv", np.array([[np.pi]]))
        assert path.read_text().strip() == "3.1415926535898"

    def test_save_summary_writes_requested_files(self, tmp_path):
        summary = Summary(num_nodes=1, nodal_displacements=np.array([[1.0, 2.0, 3.0, 0.0, 0.0, 0.0]]))
        options = Options(save_nodal_displacements=True, save_report=True, report_filename="out.txt")

        written = save_summary(summary, options, tmp_path)

        assert [p.name for p in written] == ["nodal_displacements.csv", "out.txt"]
        assert (tmp_path / "nodal_displacements.csv").read_text() == "1,2,3,0,0,0\n"
        assert "3D BEAM FEA SUMMARY" in (tmp_path / "out.txt").read_text()
        assert not (tmp_path / "nodal_forces.csv").exists()

    def test_write_report(self, tmp_path):
        path = write_report(tmp_path / "r.txt", Summary(num_nodes=0, num_elems=3))
        line = next(l for l in path.read_text().splitlines() if "Number of elements" in l)
        assert line.split()[-1] == "3"

    def test_export_failure_keeps_summary(self, tmp_path):
        job_path = write_cantilever_job(tmp_path)
        job_input = load_job_file(job_path)
        options = Options(save_nodal_displacements=True)

        with pytest.raises(ExportError) as exc_info:
            solve(job_input.job, job_input.bcs, job_input.forces, options=options,
                  output_dir=tmp_path / "does" / "not" / "exist")

        summary = exc_info.value.summary
        assert summary is not None
        assert np.isclose(summary.nodal_displacements[1, 1], -P * L**3 / (3 * EIZ), rtol=1e-10)


class TestSummaryFrames:

    def test_to_frames(self):
        summary = Summary(
            num_nodes=2,
            num_elems=1,
            nodal_displacements=np.arange(12, dtype=float).reshape(2, 6),
            element_forces=np.ones((1, 12)),
        )
        frames = summary.to_frames()

        disp = frames['nodal_displacements']
        assert isinstance(disp, pd.DataFrame)
        assert list(disp.columns) == DISPLACEMENT_COLUMNS
        assert disp.index.name == 'node'
        assert disp.loc[1, 'uy'] == 7.0

        assert list(frames['element_forces'].columns) == ELEMENT_FORCE_COLUMNS
        assert frames['tie_forces'].shape == (0, 6)


class TestJobFile:

    def test_load_and_solve(self, tmp_path):
        job_input = load_job_file(write_cantilever_job(tmp_path))

        assert len(job_input.job.nodes) == 2
        assert job_input.job.elems[0].props.EIz == EIZ
        assert len(job_input.bcs) == 6

        s = solve(job_input.job, job_input.bcs, job_input.forces)
        assert np.isclose(s.nodal_displacements[1, 1], -P * L**3 / (3 * EIZ), rtol=1e-10)

    def test_single_props_row_is_shared(self, tmp_path):
        (tmp_path / "nodes3.csv").write_text("0,0,0\n1,0,0\n2,0,0\n")
        path = write_cantilever_job(tmp_path, nodes="nodes3.csv", elems=[[0, 1], [1, 2]])

        job_input = load_job_file(path)
        assert len(job_input.job.elems) == 2
        assert job_input.job.elems[0].props == job_input.job.elems[1].props

    def test_equations_and_ties(self, tmp_path):
        (tmp_path / "equations.csv").write_text("1,1,1.0,1,2,-1.0\n0,0,1.0\n")
        path = write_cantilever_job(
            tmp_path,
            equations="equations.csv",
            ties=[[0, 1, 1e6, 1e5]],
        )
        job_input = load_job_file(path)

        assert [len(eq.terms) for eq in job_input.equations] == [2, 1]
        assert job_input.equations[0].terms[1].coefficient == -1.0
        assert job_input.ties[0].rmult == 1e5

    def test_options_block(self, tmp_path):
        path = write_cantilever_job(tmp_path, options={"epsilon": 1e-10, "save_report": True})
        options = load_job_file(path).options

        assert options.epsilon == 1e-10
        assert options.save_report
        assert options.saves_anything

    @pytest.mark.parametrize("overrides, match", [
        ({"colour": "red"}, "invalid"),
        ({"options": {"epsilon": -1.0}}, "Invalid options"),
        ({"options": {"no_such_option": 1}}, "Unknown option"),
        ({"elems": [[0, 1, 2]]}, "2 columns"),
        ({"elems": [[0.5, 1]]}, "not an integer"),
        ({"props": "missing.csv"}, "Cannot read"),
        ({"equations": [[1, 1]]}, "triples"),
    ])
    def test_rejects_bad_job_files(self, tmp_path, overrides, match):
        path = write_cantilever_job(tmp_path, **overrides)
        with pytest.raises(ConfigError, match=match):
            load_job_file(path)

    def test_not_json(self, tmp_path):
        path = tmp_path / "job.json"
        path.write_text("{nodes: ")
        with pytest.raises(ConfigError, match="not valid JSON"):
            load_job_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_job_file(tmp_path / "nope.json")


class TestCommandLine:

    def test_prints_report(self, tmp_path, capsys):
        code = main([str(write_cantilever_job(tmp_path))])

        assert code == 0
        assert "3D BEAM FEA SUMMARY" in capsys.readouterr().out

    def test_writes_results_to_output_dir(self, tmp_path):
        path = write_cantilever_job(tmp_path, options={"save_nodal_displacements": True, "csv_precision": 6})
        out_dir = tmp_path / "results"

        assert main([str(path), "--output-dir", str(out_dir)]) == 0

        rows = (out_dir / "nodal_displacements.csv").read_text().splitlines()
        assert rows[0] == "0,0,0,0,0,0"
        assert float(rows[1].split(",")[1]) == pytest.approx(-P * L**3 / (3 * EIZ), rel=1e-5)

    def test_verbose_prints_phases(self, tmp_path, capsys):
        assert main([str(write_cantilever_job(tmp_path)), "--verbose"]) == 0

        out = capsys.readouterr().out
        assert "Global stiffness matrix assembled" in out
        assert "Factorization completed" in out
        assert out.count("3D BEAM FEA SUMMARY") == 1

    def test_epsilon_override(self, tmp_path):
        path = write_cantilever_job(tmp_path, options={"save_nodal_displacements": True})
        assert main([str(path), "--epsilon", "1.0"]) == 0
        assert (tmp_path / "nodal_displacements.csv").read_text() == "0,0,0,0,0,0\n0,0,0,0,0,0\n"

    def test_bad_job_returns_error_code(self, tmp_path, capsys):
        (tmp_path / "nodes3.csv").write_text("0,0,0\n3,0,0\n9,9,9\n")
        path = write_cantilever_job(tmp_path, nodes="nodes3.csv")
        assert main([str(path)]) == 1
        assert "Analysis failed" in capsys.readouterr().err

    def test_missing_job_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.json")]) == 1
        assert "Error" in capsys.readouterr().err
