"""
regen_ratio.scoring: Pure score formulas and quadrant classification.

Modules:
  calculator - Re (structural potential) and Rx (realized outcomes) scores.
  quadrants  - Four named regions of the (Re, Rx) plotting square.
"""
