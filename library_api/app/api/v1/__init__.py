"""
Version 1 of the Library API.

Breaking changes to request or response shapes belong in a new version
subpackage (e.g. ``v2``) so existing clients keep working.
"""
