"""Module entrypoint for `python -m telereg`."""

from .cli import run

if __name__ == "__main__":
    raise SystemExit(run())
