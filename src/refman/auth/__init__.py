# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- The credential store (user registration and login checks, MongoDB)
- Signed, time-limited session tokens (itsdangerous)
"""
