"""Contribution workflow components.

- Settings loaded from the environment and `.env`
- Structured logging
- Shell command execution with scoped working directories
- Fork bootstrap and Gerrit-to-GitHub patch transfer
"""
