import numpy as np
import pytest

from simpson_synth import (
    CausalGraph,
    GraphDefinitionError,
    parse_edges,
)
import simpson_synth.scm as scm_mod


def test_graph_exposes_nodes_and_parents():
    """A valid graph keeps declaration order and exposes parents per node."""
    g = CausalGraph({"A": [], "B": ["A"], "C": ["A", "B"]})

    assert g.nodes == ("A", "B", "C")
    assert g.parents("C") == ("A", "B")
    assert g.roots == ("A",)
    assert g.n_edges == 3
    assert g.edges == [("B", "A"), ("C", "A"), ("C", "B")]
    assert g.children("A") == ("B", "C")
    assert len(g) == 3 and "B" in g and "Q" not in g


def test_unknown_parent_is_rejected():
    """Every parent must itself be a declared node."""
    with pytest.raises(GraphDefinitionError, match="ghost"):
        CausalGraph({"A": [], "B": ["A", "ghost"]})


def test_cycle_is_rejected_before_any_simulation(monkeypatch):
    """A cyclic definition fails at construction and the simulator is never reached."""
    calls = []
    monkeypatch.setattr(scm_mod, "simulate", lambda *a, **k: calls.append(a))

    with pytest.raises(GraphDefinitionError, match="cycle"):
        g = CausalGraph({"A": ["C"], "B": ["A"], "C": ["B"], "D": []})
        scm_mod.simulate(g, {}, 10)

    assert calls == []


def test_self_loop_and_repeated_parent_are_rejected():
    """Self loops and duplicated parent names are definition errors."""
    with pytest.raises(GraphDefinitionError):
        CausalGraph({"A": ["A"]})
    with pytest.raises(GraphDefinitionError):
        CausalGraph({"A": [], "B": ["A", "A"]})


def test_graph_is_read_only():
    """Mutating the input mapping or exported dict does not change the graph."""
    spec = {"A": [], "B": ["A"]}
    g = CausalGraph(spec)
    spec["B"].append("C")
    exported = g.as_dict()
    exported["A"].append("B")

    assert g.parents("B") == ("A",)
    assert g.parents("A") == ()
    with pytest.raises(TypeError):
        g._parents["A"] = ("B",)


def test_resolution_order_tolerates_confusing_declaration_order():
    """Children declared before their parents still resolve over later passes."""
    g = CausalGraph({"C": ["B"], "B": ["A"], "A": []})

    assert g.resolution_order == ("A", "B", "C")
    assert len(g.resolution_passes) == 3


def test_parse_edges_reads_chains_and_bare_nodes():
    """Edge statements may be chained; bare names declare parentless nodes."""
    parents = parse_edges("A -> B -> C; A -> C\nD, # comment\n")

    assert parents == {"A": [], "B": ["A"], "C": ["B", "A"], "D": []}
    assert CausalGraph.from_edges("A -> B").as_dict() == {"A": [], "B": ["A"]}


def test_parse_edges_rejects_malformed_statements():
    """An arrow with a missing endpoint is a definition error."""
    with pytest.raises(GraphDefinitionError):
        parse_edges("A -> ")


def test_adjacency_matches_edges():
    """adj[i, j] is set exactly for edges names[i] -> names[j]."""
    g = CausalGraph({"A": [], "B": ["A"], "C": ["B"]})
    adj, names = g.adjacency()

    assert names == ["A", "B", "C"]
    expected = np.array([[0, 1, 0], [0, 0, 1], [0, 0, 0]], dtype=np.int8)
    assert np.array_equal(adj, expected)



@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_sampled_graphs_validate_and_resolve_every_node(random_graph, seed):
    """Forward-edge random graphs pass validation and resolve parents before children."""
    g = random_graph(8, edge_prob=0.6, max_parents=2, seed=seed)

    assert len(g) == 8
    assert sorted(g.resolution_order) == sorted(g.nodes)
    pos = {v: k for k, v in enumerate(g.resolution_order)}
    for child, parent in g.edges:
        assert pos[parent] < pos[child]
    assert all(len(g.parents(v)) <= 2 for v in g)
