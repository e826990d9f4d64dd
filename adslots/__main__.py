"""
Allow the adslots package to be executed as a module.

    python -m adslots mint --count 2
"""

from adslots.main import main

if __name__ == "__main__":
    main()
