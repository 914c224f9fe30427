"""Allow running as: python -m solarb"""
from solarb.main import cli_main

if __name__ == "__main__":
    cli_main()
