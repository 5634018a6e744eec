"""Primitives shared by every service: context, errors, ports and policies."""
