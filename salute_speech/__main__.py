"""Package entry point for ``python -m salute_speech``."""

from salute_speech.cli import main

if __name__ == "__main__":
    main()
