"""Core — error hierarchy, domain types, entity contract, and reference cell.

Invariants:
    - Nothing here opens a session; callers pass one in
"""
