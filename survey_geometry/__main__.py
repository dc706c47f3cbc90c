"""Allow ``python -m survey_geometry``."""

from .tools.measure import main

if __name__ == "__main__":
    raise SystemExit(main())
