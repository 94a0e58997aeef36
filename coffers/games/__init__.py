"""
Games module - Content packs for the engine.

Each game has its own subpackage with:
- Card and event definitions
- Starting deck and game state setup
"""
