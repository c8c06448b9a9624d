from .local_assembler import ElementMatrixAssembler, LocalMatrices

__all__ = ["ElementMatrixAssembler", "LocalMatrices"]
