"""Allow ``python -m claude_multi``."""

from claude_multi.cli.main import main

if __name__ == "__main__":
    main()
