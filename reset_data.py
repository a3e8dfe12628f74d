"""
reset_data.py
-------------
Utility script to clear all stored users from the local data file.

This script is designed for development and testing purposes.

Usage:
    $ python reset_data.py

After running this script, you can recreate the demo account by executing:
    $ python seeds.py
"""

from paneldash import create_app


def main():
    """Remove every user from the configured store and persist the empty state."""
    app = create_app()
    store = app.extensions["store"]
    store.clear()

    print(f"✅ {store.path or 'in-memory store'} has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
