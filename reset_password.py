#!/usr/bin/env python3
"""
Reset a user's password in the users JSON document.

This script does not read or print any existing password.  It looks
the user up by login and replaces the stored password, going through
the same record store as the API so a running server never sees a
half‑written file.

Usage:
    python reset_password.py --file ./data/users.json --login admin@example.com --password "NewPass!234"

If --file is omitted, the configured USERS_FILE is used.  If
--password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import sys
from typing import List, Optional

from user_admin_api.app.core.exceptions import UserNotFoundError
from user_admin_api.app.core.storage import RecordStore, get_users_file_path


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Reset a user's password in the users JSON document.")
    ap.add_argument("--file", help="Path to the users document (defaults to USERS_FILE)")
    ap.add_argument("--login", required=True, help="Login (email) of the user to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args(argv)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    store = RecordStore(args.file or get_users_file_path(), strict_reads=True)
    try:
        with store.transaction() as records:
            for index, record in enumerate(records):
                if record.login == args.login:
                    records[index] = record.model_copy(update={"password": new_password})
                    break
            else:
                # Raising aborts the transaction so nothing is rewritten.
                raise UserNotFoundError(args.login)
    except UserNotFoundError:
        print(f"[!] No user found with login: {args.login}", file=sys.stderr)
        return 2

    print(f"[+] Password updated for {args.login}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
