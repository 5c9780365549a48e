"""Run the HTTP server: ``python main.py --port 31337``."""

from httpengine.bootstrap.app import main

if __name__ == "__main__":
    main()
