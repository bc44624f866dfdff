"""
Tax Intake - Source Package

Auto-save, session-resume and currency-normalization core of a
multi-step tax intake wizard (income, costs, expenses, partners,
balance sheet, company details, transactions).

DESIGN PRINCIPLES:
1. Never block the user while they fill out a page
2. One session per local profile, resumable across restarts
3. Money is normalized in exactly one place
4. The remote store is swappable
"""

__version__ = "1.0.0"
__author__ = "Tax Intake Team"
