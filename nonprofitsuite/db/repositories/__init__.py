"""
Repository functions grouped by domain.

Repositories add, flush and query; the calling service owns the commit.
"""
