"""
Error handling for the HTTP surface.

Every market error family has one status code and one ``code`` string.
"""
