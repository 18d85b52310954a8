"""Backend-agnostic transfer layer for Remote Transfer.

This module ties the FTP engine and the SFTP delegate together:
- RemoteBackend: Capability interface shared by both backends
- TransferService: Host-facing operations returning TransferOutcome
- Outcome: ErrorKind / TransferStatus / TransferOutcome result types
- Exceptions: Transfer error hierarchy
- Codec: base64 and newline contracts shared by both backends
"""
