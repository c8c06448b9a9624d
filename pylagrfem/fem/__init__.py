from .preprocessor import LocalComputationPreprocessor, ShapeFunctionCache
__all__=['LocalComputationPreprocessor','ShapeFunctionCache']
