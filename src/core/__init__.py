"""Core domain package for rollwatch.

Core contains classification, decision, scheduling, and wishlist logic without
any Discord or storage-specific code, keeping the business logic portable.
"""
