"""
DietSplit - Source Package

Splits the cost of a shared meal between people with different diets.

DESIGN PRINCIPLES:
1. Diet compatibility decides the default participants of a dish
2. People can always override who shares what
3. Tax and tip follow consumption, not head count
4. Money is never lost: every cent is either assigned or reported as unassigned
5. Storage and text extraction are swappable collaborators
"""

__version__ = "1.0.0"
__author__ = "DietSplit Team"
