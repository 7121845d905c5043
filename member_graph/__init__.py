"""
Member relationship graph for the association admin.

Turns the member roster and pairwise relations into a graph and computes
the visible subgraph under the admin's current filters.
"""
