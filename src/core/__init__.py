"""Core domain package for groupguard.

Core contains the guard engine, its state stores, and the enforcement
coordinator without any Telegram or storage-specific code.
"""
