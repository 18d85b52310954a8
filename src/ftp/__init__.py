"""FTP protocol engine for Remote Transfer.

This module drives FTP by hand over raw sockets:
- ControlChannel: Command/reply connection with auth and mode selection
- PassiveNegotiator: PASV negotiation and data connections
- TransferExecutor: Per-operation command sequences
- Listing: LIST output parsing
"""
