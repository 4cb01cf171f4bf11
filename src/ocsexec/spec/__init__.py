"""
Spec - Interface file model and JSON Schema validation.
"""
