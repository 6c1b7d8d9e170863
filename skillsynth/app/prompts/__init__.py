"""
Prompt composition engine.

This package provides registry-driven assembly of model instructions:
immutable fragments, compositions that order them per task context, and
a builder that turns a composition plus per-request scoping into a
BuiltPrompt with full provenance.

The default fragment and composition catalog lives in ``catalog``.
"""
