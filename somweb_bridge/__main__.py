"""
Main entry point for the somweb_bridge package.

Allows running the bridge as: python -m somweb_bridge
"""

from somweb_bridge.cli import main

if __name__ == "__main__":
    main()
