"""`python -m AetherForge.cli` 的命令行启动入口。"""

from AetherForge.cli.main import cli


def main() -> None:
    """执行 CLI。"""
    cli()


if __name__ == "__main__":
    main()
