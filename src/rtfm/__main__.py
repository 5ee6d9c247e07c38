"""Allow running rtfm as a module: python -m rtfm"""

from .cli import main

if __name__ == "__main__":
    main()
