"""
Trackly Core - Source Package

The local record store and budget-aggregation engine behind the Trackly
personal finance tracker.

DESIGN PRINCIPLES:
1. Every operation reads the persisted blob, mutates, writes it back
2. Fail early, fail visibly - corrupt data is never reported as "no data"
3. Validate before commit - a failed restore never touches live data
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Trackly Team"
