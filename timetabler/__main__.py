"""
Entry point for running timetabler as a module.

Usage:
    python -m timetabler generate input.json -o output.json
    python -m timetabler validate input.json
    python -m timetabler view output.json --section S1
    python -m timetabler metrics output.json --input input.json
    python -m timetabler sample -o input.json
"""

from timetabler.cli import main

if __name__ == "__main__":
    main()
