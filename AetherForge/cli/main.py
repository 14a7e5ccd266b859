"""
CLI 主入口 - 使用 Click 框架
CLI main entry - using Click framework.

在服务器之外编译、加载和自动加载扩展；控制台充当交互式请求者。
Compile, load, and autoload extensions outside the server; the console acts
as the interactive requester.
"""

from __future__ import annotations

import json
import os
import sys

import click

from AetherForge import __app_name__, __version__
from AetherForge.config import ConfigManager, set_config_manager
from AetherForge.extensions import CommandRegistry, PluginRegistry
from AetherForge.kernel import paths
from AetherForge.kernel.logging import setup_logging
from AetherForge.scripting import COMPILERS, ModuleLoader, lookup


class ConsoleRequester:
    """把交互式结果消息打印到控制台 / Prints interactive result messages to the console."""

    def message(self, text: str) -> None:
        click.echo(text)


def _bootstrap(debug: bool) -> ConfigManager:
    config_mgr = ConfigManager()
    config_mgr.load()
    set_config_manager(config_mgr)

    level = "DEBUG" if debug else config_mgr.get("logging.level", "INFO")
    setup_logging(level, paths.get_log_file())
    return config_mgr


def _make_loader(config_mgr: ConfigManager) -> ModuleLoader:
    server_version = str(config_mgr.get("server.version", __version__))
    return ModuleLoader(CommandRegistry(), PluginRegistry(server_version))


def _check_name(name: str) -> None:
    if not name.isidentifier():
        raise click.BadParameter(f'"{name}" is not a valid name', param_hint="NAME")


@click.group()
@click.option("--root", type=click.Path(file_okay=False), default=None, help="服务器根目录 / Server root directory")
@click.option("--debug", is_flag=True, help="输出调试日志 / Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, root: str | None, debug: bool) -> None:
    """AetherForge - 扩展编译与动态加载"""
    if root:
        os.environ["AETHERFORGE_ROOT"] = os.path.abspath(root)
    ctx.obj = _bootstrap(debug)


@cli.command()
def languages() -> None:
    """列出可用语言 / List available languages."""
    for compiler in COMPILERS:
        state = " (unavailable)" if compiler.backend.disabled else ""
        click.echo(f"  {compiler.short_name} - {compiler.full_name} [{compiler.file_extension}]{state}")


@cli.command()
@click.argument("name")
@click.option("--lang", default="", help="源语言短名 / Source language short name")
@click.option("--plugin", is_flag=True, help="生成插件而非命令 / Generate a plugin instead of a command")
@click.option("--creator", default="", help="插件作者 / Plugin author")
def new(name: str, lang: str, plugin: bool, creator: str) -> None:
    """生成示例源码 / Generate example source."""
    _check_name(name)
    requester = ConsoleRequester()
    compiler = lookup(lang, requester)
    if compiler is None:
        sys.exit(1)

    if plugin:
        path = compiler.plugin_path(name)
        source = compiler.gen_example_plugin(name, creator or "Unknown")
    else:
        name = name.capitalize()
        path = compiler.command_path(name)
        source = compiler.gen_example_command(name)

    if path.exists():
        requester.message(f"File {path} already exists. Choose another name.")
        sys.exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(source)
    requester.message(f"Successfully created a new example {'plugin' if plugin else 'command'} at {path}")


@cli.command("compile")
@click.argument("name")
@click.option("--lang", default="", help="源语言短名 / Source language short name")
@click.option("--plugin", is_flag=True, help="编译插件而非命令 / Compile a plugin instead of a command")
def compile_cmd(name: str, lang: str, plugin: bool) -> None:
    """编译命令或插件 / Compile a command or plugin."""
    _check_name(name)
    requester = ConsoleRequester()
    compiler = lookup(lang, requester)
    if compiler is None:
        sys.exit(1)

    if plugin:
        src = compiler.plugin_path(name)
        dst = paths.plugin_module_path(name)
        kind = "Plugin"
    else:
        name = name.capitalize()
        src = compiler.command_path(name)
        dst = paths.command_module_path(name)
        kind = "Command"

    if not src.exists():
        requester.message(f"File {src} does not exist.")
        sys.exit(1)

    if not compiler.try_compile(requester, kind, [str(src)], str(dst)):
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.option("--plugin", is_flag=True, help="加载插件而非命令 / Load a plugin instead of a command")
@click.pass_obj
def load(config_mgr: ConfigManager, name: str, plugin: bool) -> None:
    """加载已编译的命令或插件 / Load a compiled command or plugin."""
    _check_name(name)
    requester = ConsoleRequester()
    loader = _make_loader(config_mgr)

    if plugin:
        if not loader.load_plugin(paths.plugin_module_path(name), False):
            requester.message(f"Error loading plugin {name}. See the error log for details.")
            sys.exit(1)
        requester.message(f"Plugin {name} loaded successfully.")
        return

    error = loader.load_commands(paths.command_module_path(name.capitalize()))
    if error is not None:
        requester.message(error)
        sys.exit(1)
    for cmd in loader.commands.all():
        requester.message(f"Command /{cmd.name} loaded successfully.")


@cli.command()
@click.pass_obj
def autoload(config_mgr: ConfigManager) -> None:
    """运行命令与插件的自动加载 / Run command and plugin autoload."""
    loader = _make_loader(config_mgr)
    commands = loader.autoload_commands()
    plugins = loader.autoload_plugins()
    click.echo(f"Autoloaded {len(commands)} command module(s) and {len(plugins)} plugin module(s).")
    for cmd in loader.commands.all():
        click.echo(f"  /{cmd.name}")
    for plugin in loader.plugins.all():
        click.echo(f"  {plugin.name} (plugin)")


@cli.command()
@click.pass_obj
def init(config_mgr: ConfigManager) -> None:
    """初始化目录与配置 / Initialize directories and configuration."""
    for directory in (paths.get_source_dir(), paths.get_command_dll_dir(), paths.get_plugin_dir()):
        directory.mkdir(parents=True, exist_ok=True)

    autoload_file = paths.get_autoload_file()
    if not autoload_file.exists():
        autoload_file.parent.mkdir(parents=True, exist_ok=True)
        autoload_file.write_text("# One command name per line\n", encoding="utf-8")

    click.echo(f"配置文件: {config_mgr.config_path}")


@cli.command()
def version() -> None:
    """显示版本信息 / Show version info."""
    click.echo(f"{__app_name__} v{__version__}")


@cli.group()
def conf() -> None:
    """配置管理 / Configuration management."""


@conf.command("show")
@click.argument("key", required=False)
@click.pass_obj
def conf_show(config_mgr: ConfigManager, key: str | None) -> None:
    """显示配置 / Show configuration."""
    if key:
        value = config_mgr.get(key)
        if value is None:
            click.echo(f"键 '{key}' 不存在")
            return
        click.echo(json.dumps(value, ensure_ascii=False, indent=2))
    else:
        click.echo(json.dumps(config_mgr.as_dict(), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
