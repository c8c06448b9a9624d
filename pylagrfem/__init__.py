"""
pylagrfem
=========
Element-local computations for Lagrangian finite elements on hybrid
triangle/quadrilateral meshes.
"""
from pylagrfem.core import RefEl, Geometry, Point, SegmentO1, TriaO1, QuadO1
from pylagrfem.integration import QuadRule, make_quad_rule
from pylagrfem.fem.reference import (ScalarReferenceFiniteElement, FeLagrangeTria,
                                     FeLagrangeQuad, get_reference)
from pylagrfem.fem import LocalComputationPreprocessor, ShapeFunctionCache
from pylagrfem.assembly import ElementMatrixAssembler, LocalMatrices
from pylagrfem.errors import (LocalComputationError, IncompatibleSpacesError,
                              InternalConsistencyError, DegenerateGeometryError)
from pylagrfem.utils.tracing import TraceControl

__version__ = "0.1.0"

__all__ = [
    "RefEl", "Geometry", "Point", "SegmentO1", "TriaO1", "QuadO1",
    "QuadRule", "make_quad_rule",
    "ScalarReferenceFiniteElement", "FeLagrangeTria", "FeLagrangeQuad", "get_reference",
    "LocalComputationPreprocessor", "ShapeFunctionCache",
    "ElementMatrixAssembler", "LocalMatrices",
    "LocalComputationError", "IncompatibleSpacesError",
    "InternalConsistencyError", "DegenerateGeometryError",
    "TraceControl",
]
