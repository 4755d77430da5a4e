"""
Application Layer for the guided session engine.

Part of HYG-15: Session engine ports

This package contains:
- ports/: Abstract collaborator interfaces (what the engine needs)
- exceptions.py: Errors shared by the engine and its adapters
"""
