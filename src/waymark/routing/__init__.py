"""Routing — rule compiler, converters, and the match/build adapter.

Rules are registered during setup and sorted into match and build order
before the first request is routed.
"""
