"""
equityvest - Designation-based equity vesting and pooled lottery accounting

Main Components:
- Vesting: class registry, grant ledger, schedule engine and claim processing
- Lottery: fixed-capacity pooled deposits with a single random payout
- Core: token custody, access control, configuration and logging

For design notes, see DESIGN.md
"""

__version__ = "0.1.0"
__author__ = "equityvest Development Team"

__all__ = []
