from __future__ import annotations


class SimpsonSynthError(Exception):
    """Base class for every error raised by simpson_synth."""


class GraphDefinitionError(SimpsonSynthError, ValueError):
    """Unknown parent reference, self loop or cycle in a graph definition."""


class ParameterLengthError(SimpsonSynthError, ValueError):
    """Parameter vector does not line up with the graph's edge keys."""


class UnresolvedDependencyError(SimpsonSynthError, RuntimeError):
    """A resolution pass made no progress while nodes were still pending."""

    def __init__(self, pending, resolved=()):
        self.pending = list(pending)
        self.resolved = list(resolved)
        super().__init__(
            f"cannot resolve {self.pending}: no progress after resolving {self.resolved}"
        )


class FitError(SimpsonSynthError, RuntimeError):
    """Regression is singular or under-determined for a covariate set."""
