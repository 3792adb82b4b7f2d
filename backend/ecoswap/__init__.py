"""
EcoSwap sustainable alternatives service.

Shortlists similar catalog products, re-ranks them by environmental
improvement and writes comparison copy for the best candidates.
"""

__version__ = "1.0.0"
