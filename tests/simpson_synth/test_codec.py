import numpy as np
import pytest

from simpson_synth import (
    CausalGraph,
    ParameterLengthError,
    decode,
    edge_keys,
    encode,
)


def _graph():
    # declared out of lexicographic order on purpose
    return CausalGraph({"b": ["z", "a"], "a": [], "z": [], "c": ["a"]})


def test_edge_keys_sorted_by_child_then_parent():
    """Canonical order sorts (child, parent) lexicographically, ignoring declaration order."""
    assert edge_keys(_graph()) == [("b", "a"), ("b", "z"), ("c", "a")]


def test_decode_assigns_entries_in_canonical_order():
    """Vector entries map onto edge keys one by one."""
    w = decode([0.5, -1.0, 2.0], _graph())

    assert w == {"b": {"a": 0.5, "z": -1.0}, "c": {"a": 2.0}}


def test_decode_rejects_wrong_length():
    """A vector that does not match the edge count raises ParameterLengthError."""
    with pytest.raises(ParameterLengthError):
        decode([1.0, 2.0], _graph())
    with pytest.raises(ParameterLengthError):
        decode(np.zeros((3, 1)), _graph())


def test_encode_rejects_missing_or_extra_edges():
    """encode needs exactly one weight per edge key."""
    g = _graph()
    with pytest.raises(ParameterLengthError):
        encode({"b": {"a": 1.0, "z": 1.0}}, g)
    with pytest.raises(ParameterLengthError):
        encode({"b": {"a": 1.0, "z": 1.0}, "c": {"a": 1.0, "z": 3.0}}, g)


@pytest.mark.parametrize("seed", range(5))
def test_decode_then_encode_round_trip(random_graph, seed):
    """decode followed by encode returns the original vector exactly."""
    g = random_graph(9, edge_prob=0.5, max_parents=4, seed=seed)
    v = np.random.default_rng(seed).normal(0, 3, size=g.n_edges)

    out = encode(decode(v, g), g)

    assert out.shape == v.shape
    assert np.array_equal(out, v)


def test_encode_then_decode_round_trip():
    """encode followed by decode reproduces the weight structure."""
    g = _graph()
    w = {"c": {"a": 0.25}, "b": {"z": -3.5, "a": 1e-9}}

    assert decode(encode(w, g), g) == w


def test_edgeless_graph_has_empty_vector():
    """A graph without edges encodes to an empty vector."""
    g = CausalGraph({"a": [], "b": []})

    assert decode([], g) == {}
    assert encode({}, g).shape == (0,)
