"""Use-case level logic.

These modules implement the deterministic fraud-indicator checks and risk
scoring over tables produced by the integrations layer.

They should be:
- deterministic
- unit-testable
- free of web/framework code
"""
