"""pylagrfem.errors
Typed failures raised by the local computations.
"""
import numpy as np


class LocalComputationError(Exception):
    """Base class of every error raised by the element-local computations."""


class IncompatibleSpacesError(LocalComputationError, ValueError):
    """The triangle and quadrilateral spaces cannot be combined.

    Raised at construction time of the preprocessor; continuing would corrupt
    any global numbering built on shared vertices and edges.
    """


class InternalConsistencyError(LocalComputationError, RuntimeError):
    """A reference finite element returned data of the wrong size."""


class DegenerateGeometryError(LocalComputationError, ArithmeticError):
    """Non-positive integration element on a cell (collapsed or inverted)."""

    def __init__(self, message, integration_elements=None):
        super().__init__(message)
        self.integration_elements = (None if integration_elements is None
                                     else np.array(integration_elements, dtype=float))
