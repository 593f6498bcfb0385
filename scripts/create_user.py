#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from refman.auth.users import register
from refman.core.log import setup_logging
from refman.errors import RefmanError


def main() -> None:
    setup_logging()
    first_name = input("First name: ").strip()
    last_name = input("Last name: ").strip()
    username = input("Username: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords no coinciden")

    try:
        user = register(first_name, last_name, username, pw1)
    except RefmanError as e:
        raise SystemExit(f"ERROR -> {e.message}")
    print(f"OK -> {user.username} ({user.id})")


if __name__ == "__main__":
    main()
