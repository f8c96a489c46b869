"""模块说明：__main__。"""

from xhsbot.cli.commands import cli

if __name__ == "__main__":
    cli()
