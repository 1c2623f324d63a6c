"""
Autoplanner

Turns a free-text command into email triage, calendar rebalancing and study
planning, and keeps an audited history of every run.
"""

__version__ = "0.1.0"
