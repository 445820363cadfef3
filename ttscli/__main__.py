"""
Entry point for the ttscli package when run as a module.

This allows the package to be executed directly with:
    python -m ttscli
"""

from .cli import main

if __name__ == "__main__":
    main()
