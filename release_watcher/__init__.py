"""
Release Watcher - Monitor GitHub repositories for new releases.

A Python daemon that polls GitHub release listings, remembers the
last-seen tag of each repository and shows a desktop notification
when a new release is published.
"""

__version__ = "1.0.0"
__author__ = "Grégoire Compagnon"
__email__ = "obeone@obeone.org"
