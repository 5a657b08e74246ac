"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer. This is where the relational store,
the cache, password hashing, token signing and the job queue live.
"""
