"""
Domain layer package.

Entities (users, teams, players, listings), the trade and roster rules,
and the ports the outer layers implement. Standard library only.
"""
