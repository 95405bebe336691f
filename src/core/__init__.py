"""Core domain package for dayscope.

Core contains the pattern catalog, date arithmetic, matching, and analysis
logic without any storage-specific code, keeping the business logic portable.
"""
