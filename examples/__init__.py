"""Example programs for graphclone.

These demonstrate library usage but are not part of the core API.
"""
