from .quadrature import QuadRule, make_quad_rule

__all__ = ['QuadRule', 'make_quad_rule']
