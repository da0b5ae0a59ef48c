"""
leaguekit: config-driven fantasy league engine.
Sport rules are data (RuleSetConfig); one engine derives rosters, schedules,
stat lines and scores from them.
"""

__version__ = "0.1.0"
