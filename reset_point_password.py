#!/usr/bin/env python3
"""
Reset the password of a collection point in the SQLite database.

This script DOES NOT read or reveal any existing password.  It simply
stores a new hash (PBKDF2-HMAC-SHA256, format "salthex$hashhex") for
the point registered with the given e-mail.

Usage:
    python reset_point_password.py --db ./recycle_points_api/recycle_points.db --email ponto@ex.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sqlite3
import sys

from recycle_points_api.app.core.security import hash_password


def main():
    ap = argparse.ArgumentParser(description="Reset a collection point password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./recycle_points_api/recycle_points.db)")
    ap.add_argument("--email", required=True, help="E-mail the point is registered with")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM points WHERE email = ?", (args.email,))
        row = cur.fetchone()
        if not row:
            print(f"[!] No point found with email: {args.email}", file=sys.stderr)
            sys.exit(2)

        cur.execute(
            "UPDATE points SET password = ? WHERE id = ?",
            (hash_password(new_password), row[0]),
        )
        conn.commit()
        print(f"[+] Password updated for point {row[0]} ({args.email})")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
