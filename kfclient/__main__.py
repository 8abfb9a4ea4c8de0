"""
CLI entry point, when used as a module: `python -m kfclient`.

Useful for debugging in the IDEs (use the start-mode "Module", module "kfclient").
"""
from kfclient import cli

if __name__ == '__main__':
    cli.main()
