"""
Plate Discipline: walks and hit-by-pitch projections for MLB DFS.
"""

__version__ = '1.0.0'
