"""
Skill-synthesis engine.

This package turns source material into validated skill documents:
mode selection, source rendering, one model call per operation, response
parsing, and citation numbering across revisions.

Prompt assembly is delegated to ``skillsynth.app.prompts``; the model is
reached through ``skillsynth.app.llm``.
"""
