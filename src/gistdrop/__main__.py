"""Allow ``python -m gistdrop``; the context-menu command line relies on it."""

from gistdrop.app import main

if __name__ == "__main__":
    main()
