from .refel import RefEl
from .geometry import Geometry, Point, SegmentO1, TriaO1, QuadO1
__all__=['RefEl','Geometry','Point','SegmentO1','TriaO1','QuadO1']
