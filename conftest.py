# conftest.py
import pytest

from pylagrfem.fem.reference import get_reference
from pylagrfem.fem.preprocessor import LocalComputationPreprocessor
from pylagrfem.utils.tracing import TraceControl


@pytest.fixture
def no_trace():
    """Tracing off regardless of PYLAGRFEM_TRACE in the environment."""
    return TraceControl()


@pytest.fixture
def pre_p1(no_trace):
    return LocalComputationPreprocessor(get_reference('tri', 1), get_reference('quad', 1),
                                        trace=no_trace)


@pytest.fixture
def pre_p2(no_trace):
    return LocalComputationPreprocessor(get_reference('tri', 2), get_reference('quad', 2),
                                        trace=no_trace)
