"""
FriendSocial: scheduling of recurring and ad-hoc social activities.
"""

__version__ = "0.1.0"
