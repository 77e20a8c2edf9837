"""Routing: route patterns and the specificity-ordered matcher.

A route table is built once per scan into an immutable ``Router`` and
replaced wholesale when the routes change.
"""
