"""Allow running the CLI with `python -m grace.cli`."""

from grace.cli import main

if __name__ == "__main__":
    main()
