"""
Leaderboard Module
----------------
Ranks travelers and countries by number of visits.
"""
