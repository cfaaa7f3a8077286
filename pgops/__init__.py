"""
pgops.

Command-line plugin for lifecycle operations on hosted PostgreSQL
databases: info, ingress, promote, psql, reset, unfollow and wait.
"""

__version__ = "0.1.0"
