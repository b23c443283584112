"""
CLI entry point, when used as a module: `python -m clusterkeeper`.

Useful for debugging in the IDEs (use the start-mode "Module", module "clusterkeeper").
"""
from clusterkeeper import cli

if __name__ == '__main__':
    cli.main()
