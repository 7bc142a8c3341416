import json

import numpy as np
import pandas as pd

from simpson_synth import AnnealingConfig, Dataset, default_problem, generate_paradox_dataset
from simpson_synth.cli import main


def test_generate_paradox_dataset_writes_table(tmp_path):
    """The persisted CSV has one header of node names and one row per unit."""
    p = default_problem(n_rows=150, n_confounders=2)
    ds, result = generate_paradox_dataset(p, AnnealingConfig(iterations=5, seed=0, log_every=0), out_dir=str(tmp_path))

    assert isinstance(ds, Dataset)
    table = pd.read_csv(tmp_path / "data.csv")
    assert list(table.columns) == ["Z1", "Z2", "X", "Y"]
    assert len(table) == 150
    assert np.allclose(table.to_numpy(), ds.frame.to_numpy())

    meta = json.loads((tmp_path / "weights.json").read_text())
    assert meta["weights"] == result.weights
    assert len(meta["trajectory"]) == 3
    assert meta["seed"] == 0


def test_cli_runs_default_problem(tmp_path, capsys):
    """The CLI exits zero and writes data.csv for the default confounder fan."""
    out = tmp_path / "cli"
    code = main([
        "--rows", "120", "--noise", "0.2", "--iterations", "5", "--seed", "1",
        "--confounders", "2", "--log-every", "0", "--out", str(out),
    ])

    assert code == 0
    assert (out / "data.csv").is_file()
    assert (out / "config.json").is_file()
    assert "trajectory:" in capsys.readouterr().out


def test_cli_accepts_edge_list_graph(tmp_path):
    """A graph given as an edge list is searched over the listed covariates."""
    out = tmp_path / "edges"
    code = main([
        "--graph", "W -> X, W -> Y, X -> Y", "--covariates", "W",
        "--rows", "100", "--iterations", "3", "--log-every", "0", "--out", str(out),
    ])

    assert code == 0
    assert list(pd.read_csv(out / "data.csv").columns) == ["W", "X", "Y"]


def test_cli_reads_graph_file(tmp_path):
    """--graph may point at a file holding the edge list."""
    spec = tmp_path / "graph.txt"
    spec.write_text("W -> X\nW -> Y\nX -> Y\n")
    code = main(["--graph", str(spec), "--rows", "80", "--iterations", "2", "--log-every", "0",
                 "--out", str(tmp_path / "out")])

    assert code == 0


def test_cli_exits_nonzero_on_cyclic_graph(tmp_path, capsys):
    """A graph definition error is reported on stderr with a non-zero exit code."""
    code = main(["--graph", "A -> B, B -> A", "--focal", "A", "--outcome", "B",
                 "--covariates", "", "--out", str(tmp_path / "bad")])

    assert code == 1
    assert "cycle" in capsys.readouterr().err
    assert not (tmp_path / "bad").exists()


def test_cli_exits_nonzero_on_unwritable_output(tmp_path, capsys):
    """An output path that cannot be created is reported as an error, not a traceback."""
    blocker = tmp_path / "file.txt"
    blocker.write_text("not a directory")
    code = main(["--rows", "80", "--iterations", "2", "--confounders", "2", "--log-every", "0",
                 "--out", str(blocker / "sub")])

    assert code == 1
    assert "error:" in capsys.readouterr().err
