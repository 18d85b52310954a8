"""SFTP delegate for Remote Transfer.

Satisfies every transfer operation for sftp:// targets through paramiko
instead of the hand-driven FTP engine.
"""
