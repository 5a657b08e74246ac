"""
Market bounded context, domain layer.

This module contains all domain logic for the market context:
- Users, teams and squads
- Transfer listings
- Purchase rules (price, roster bounds, funds)
"""
