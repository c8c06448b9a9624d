from .tracing import TraceControl
__all__ = ["TraceControl"]
