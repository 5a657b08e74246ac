"""
Application layer package.

One use case per module, each a class with a single ``execute`` method.
Use cases open a unit of work, apply domain rules and return DTOs.
"""
