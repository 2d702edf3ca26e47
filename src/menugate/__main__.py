"""Entry point for 'python -m menugate'."""

from menugate.cli import main

if __name__ == "__main__":
    main()
