"""
Feature modules for the Gatehouse backend.

- principals: user and admin accounts, storage and management
- auth: credentials, one-time codes, tokens and the authorization gate
- notifications: outbound email

Each module keeps its interfaces, models, exceptions and service apart, and
modules talk to each other through interfaces, not concrete implementations.
"""
