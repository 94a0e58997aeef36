"""
Coffers - Effect resolution engine for an economic deck-builder.

Cards and events carry conditional, data-driven effects. The engine:
- Evaluates trigger conditions against live game state
- Computes magnitudes from fixed values or dynamic formulas
- Pauses for target selection and resumes later
- Executes effects in order, chaining results between them
"""

__version__ = "0.1.0"
