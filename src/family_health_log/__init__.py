"""
Family Health Log - Daily health event tracker for a household.

Records water intake, meals, weight, sleep, fitness and bathroom visits per
family member, and builds merged daily feeds and summaries across users.
"""

__version__ = "0.1.0"
