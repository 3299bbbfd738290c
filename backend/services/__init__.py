"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP layer.

Modules:
    - discovery: Proximity post feed, notification poll and user discovery
    - social: Friendships and join requests
    - messaging: Direct messages and conversation aggregation
    - push: Push subscriptions and delivery
"""
