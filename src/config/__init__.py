"""Configuration module for Remote Transfer.

This module handles targets, settings and credentials:
- ConnectionTarget: URI parsing with default ports
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- Paths: Per-user data directories
"""
