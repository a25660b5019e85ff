# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Local authentication.

This package provides:
- Password hashing/verification (argon2) and the password/email policy
- The user directory kept in the key-value store, with first-run seeding
- Sessions with a fixed 24 h expiry, bound to signed cookies (itsdangerous)
"""
