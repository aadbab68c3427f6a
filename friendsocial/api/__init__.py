"""
HTTP API for FriendSocial.
"""
