#!/usr/bin/env python3
"""
Password Hash Generator
Generates the bcrypt hash for the admin account.
Run this script to create the ADMIN_PASSWORD_HASH for your .env file.
"""
import getpass

from portfolio_api.utils.auth import hash_password, verify_password


def main():
    """Prompt for the admin password and print the .env line."""
    print("=" * 60)
    print("Admin Password Hash Generator")
    print("=" * 60)
    print()

    password = getpass.getpass("Enter admin password: ")
    if not password:
        print("\nError: Password cannot be empty")
        return

    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("\nError: Passwords do not match")
        return

    print("\nGenerating hash (this may take a moment)...")
    hashed = hash_password(password)

    if not verify_password(password, hashed):
        print("\nError: Generated hash failed verification")
        return

    print("\nCopy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hashed}")
    print()
    print("Keep this hash secret and never commit it to version control!")


if __name__ == "__main__":
    main()
